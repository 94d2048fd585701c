"""
EchoTherapy
===========

Voice/video emotional reflection: record a short clip, receive an empathetic
summary, a three-step coping plan, a spoken affirmation and a procedural
"mood flower" whose shape encodes the detected emotion.

Components:
    - capture: Recorded media and capture adapters
    - services: Gemini (or mock) emotion analysis and speech synthesis
    - audio: PCM decoding and single-voice playback
    - session: Transition table, LangGraph pipeline, session controller
    - visualization: Mood flower scene generation and SVG rendering

Example:
    from echo_therapy.config import settings
    from echo_therapy.session import SessionController

    controller = SessionController.from_settings(settings)
    # See cli.py for an end-to-end run
"""

__version__ = "0.1.0"
__author__ = "EchoTherapy Project"

__all__ = [
    "__version__",
]
