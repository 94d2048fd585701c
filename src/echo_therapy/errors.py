"""
Base exception for EchoTherapy.

Concrete errors live next to the code that raises them:
    - CaptureError   (echo_therapy.capture.adapter)
    - AnalysisError  (echo_therapy.services.analysis)
    - SynthesisError (echo_therapy.services.speech)
    - DecodeError    (echo_therapy.audio.decoder)
"""


class EchoTherapyError(Exception):
    """Base class for all recoverable session pipeline errors."""

    kind: str = "pipeline"
