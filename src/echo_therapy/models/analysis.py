"""
Analysis Models
===============

The single authoritative payload produced by a completed session.

Output Contract (camelCase, as returned by the analysis service):
    {
        "emotion": "Anxiety",
        "empathySummary": "It sounds like a lot is pressing on you right now.",
        "copingPlan": [
            "Breathe in for 4 counts, hold for 7, out for 8.",
            "Name five things you can see around you.",
            "Write down the one worry that feels loudest."
        ],
        "flowerConfig": {
            "baseColor": "#8B5CF6",
            "intensity": 7,
            "bloomSpeed": 2,
            "style": "trembling"
        },
        "affirmationText": "My friend, you are doing the best you can.",
        "distressScore": 0.42
    }

Design Rules:
    - Every field is required
    - copingPlan has exactly 3 steps, order is meaningful
    - distressScore > 0.8 surfaces crisis resources (fixed, not configurable)
    - The score is a routing signal, never a diagnosis
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from echo_therapy.models.flower import FlowerConfig


# Strict ">" boundary: 0.80 does not trigger, 0.81 does.
CRISIS_THRESHOLD = 0.8

COPING_PLAN_LENGTH = 3

AFFIRMATIVE_EMOTION_PATTERN = re.compile(
    r"\b(joy(ful|ous)?|relie(f|ved)|happ(y|iness)|hope(ful)?)\b", re.IGNORECASE
)


@dataclass(frozen=True, slots=True)
class CrisisResource:
    """A single immediate-support contact shown with high distress."""

    label: str
    contact: str


CRISIS_HEADLINE = "You are going through a difficult moment."
CRISIS_MESSAGE = "You don't have to carry this alone. Immediate support is available:"
CRISIS_RESOURCES: Tuple[CrisisResource, ...] = (
    CrisisResource(label="US Crisis Line", contact="988"),
    CrisisResource(label="Crisis Text Line", contact="Text HOME to 741741"),
)


class AnalysisResult(BaseModel):
    """
    Emotional analysis of one recorded session.

    Attributes:
        emotion: Short emotion label (free text)
        empathy_summary: One warm, empathetic sentence
        coping_plan: Exactly three actionable steps, first step first
        flower_config: Visualization descriptor
        affirmation_text: Exact text sent to the speech client
        distress_score: Crisis signal in [0, 1]; 1.0 is severe
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    emotion: str = Field(
        ...,
        min_length=1,
        description="The primary detected emotion",
    )

    empathy_summary: str = Field(
        ...,
        alias="empathySummary",
        min_length=1,
        description="A one-sentence empathetic summary of the user's state",
    )

    coping_plan: List[str] = Field(
        ...,
        alias="copingPlan",
        min_length=COPING_PLAN_LENGTH,
        max_length=COPING_PLAN_LENGTH,
        description="A 3-step personalized coping plan",
    )

    flower_config: FlowerConfig = Field(
        ...,
        alias="flowerConfig",
        description="Descriptor for the mood flower",
    )

    affirmation_text: str = Field(
        ...,
        alias="affirmationText",
        min_length=1,
        description="A calming affirmation to be spoken aloud",
    )

    distress_score: float = Field(
        ...,
        alias="distressScore",
        ge=0.0,
        le=1.0,
        description="0.0 (calm/happy) to 1.0 (severe crisis)",
    )

    @field_validator("emotion", "empathy_summary", "affirmation_text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip surrounding whitespace and reject blank text."""
        v = v.strip()
        if not v:
            raise ValueError("text must not be blank")
        return v

    @field_validator("coping_plan")
    @classmethod
    def validate_plan(cls, v: List[str]) -> List[str]:
        """Ensure each coping step is non-empty."""
        steps = [step.strip() for step in v]
        if any(not step for step in steps):
            raise ValueError("coping plan steps must not be blank")
        return steps

    @field_validator("distress_score", mode="before")
    @classmethod
    def validate_score_type(cls, v):
        """Booleans are JSON-valid but never a score."""
        if isinstance(v, bool):
            raise ValueError("distress_score must be a number")
        return v

    @property
    def needs_crisis_support(self) -> bool:
        """True when crisis resources must be shown."""
        return needs_crisis_support(self.distress_score)

    @property
    def is_affirmative(self) -> bool:
        """True when the emotion names joy, relief, happiness or hope as a whole word."""
        return bool(AFFIRMATIVE_EMOTION_PATTERN.search(self.emotion))

    def to_payload(self) -> dict:
        """Export in the service's camelCase wire format."""
        return self.model_dump(mode="json", by_alias=True)


def needs_crisis_support(distress_score: float) -> bool:
    """Crisis affordance trigger: strictly above CRISIS_THRESHOLD."""
    return distress_score > CRISIS_THRESHOLD
