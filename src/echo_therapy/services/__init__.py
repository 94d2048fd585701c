"""
Services Module
===============

Remote collaborators of the session controller.

Both services are pluggable black boxes. The controller consumes only their
outputs (a validated AnalysisResult, raw PCM bytes), never their internals.

Components:
    - AnalysisClient: Protocol; MockAnalysisClient, GeminiAnalysisClient
    - SpeechClient: Protocol; MockSpeechClient, GeminiSpeechClient
"""

from echo_therapy.services.analysis import (
    AnalysisClient,
    AnalysisError,
    GeminiAnalysisClient,
    MockAnalysisClient,
    create_analysis_client,
    parse_analysis_payload,
)
from echo_therapy.services.speech import (
    GeminiSpeechClient,
    MockSpeechClient,
    SpeechClient,
    SynthesisError,
    create_speech_client,
)

__all__ = [
    "AnalysisClient",
    "AnalysisError",
    "GeminiAnalysisClient",
    "MockAnalysisClient",
    "create_analysis_client",
    "parse_analysis_payload",
    "GeminiSpeechClient",
    "MockSpeechClient",
    "SpeechClient",
    "SynthesisError",
    "create_speech_client",
]
