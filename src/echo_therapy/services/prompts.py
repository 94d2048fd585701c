"""
Prompts and response schema for the Gemini analysis backend.
"""

SYSTEM_INSTRUCTION = (
    "You are EchoTherapy. You are a mirror that reflects the user's feelings "
    "with deep empathy and visual art."
)

ANALYSIS_PROMPT = """Analyze the input for emotion, tone, and facial expressions.

RULES FOR DISTRESS SCORE:
- Rate from 0.0 to 1.0.
- Above 0.8 indicates potential crisis (self-harm, extreme panic, hopelessness).

RULES FOR FLOWER CONFIG:
1. ANGER/FRUSTRATION: style='spiky', color='#EF4444' (red tones).
2. SADNESS/GRIEF: style='drooping', color='#6366F1' (blue/indigo tones).
3. ANXIETY/FEAR: style='trembling', color='#8B5CF6' (purple tones).
4. CALM/NEUTRAL: style='calm', color='#10B981' (green tones).
5. HAPPINESS/HOPE/RELIEF: style='particle', color='#F59E0B' (yellow/gold tones).
intensity is a whole number from 1 to 10, bloomSpeed a whole number from 1 to 5.

RULES FOR COPING PLAN:
- Exactly 3 distinct, actionable steps.
- Focus on physiology (breath), grounding (senses), or CBT (reframing).
- Keep it culturally neutral and universally applicable.

RULES FOR AFFIRMATION:
- If the user says their name, use it. E.g., "Sarah, you are..."
- If no name, start with "My friend, you are..."
- Tone: compassionate, slow, validating. About 10 seconds when spoken."""

ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "emotion": {
            "type": "STRING",
            "description": "The primary detected emotion.",
        },
        "distressScore": {
            "type": "NUMBER",
            "description": (
                "A score from 0.0 (calm/happy) to 1.0 "
                "(severe crisis/suicidal ideation/extreme panic)."
            ),
        },
        "empathySummary": {
            "type": "STRING",
            "description": "A one-sentence warm, empathetic summary of the user's state.",
        },
        "copingPlan": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A 3-step personalized, ultra-practical coping plan.",
        },
        "flowerConfig": {
            "type": "OBJECT",
            "properties": {
                "baseColor": {"type": "STRING", "description": "Hex color code."},
                "intensity": {"type": "NUMBER", "description": "Intensity of emotion from 1 to 10."},
                "bloomSpeed": {"type": "NUMBER", "description": "Bloom speed from 1 (slow) to 5 (fast)."},
                "style": {
                    "type": "STRING",
                    "enum": ["spiky", "drooping", "trembling", "calm", "particle"],
                    "description": "The visual style of the flower based on emotion.",
                },
            },
            "required": ["baseColor", "intensity", "bloomSpeed", "style"],
        },
        "affirmationText": {
            "type": "STRING",
            "description": "A calming 10-second affirmation.",
        },
    },
    "required": [
        "emotion",
        "distressScore",
        "empathySummary",
        "copingPlan",
        "flowerConfig",
        "affirmationText",
    ],
}

# Let users describe distress without the request being blocked.
RELAXED_SAFETY_CATEGORIES = (
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
)
