"""
Session State Models
====================

Processing state of the session controller.

States:
    idle       - Waiting for the user to start
    recording  - Capture adapter is recording (no network calls yet)
    analyzing  - Analysis, speech synthesis and decoding in flight
    completed  - Result available, flower visible, affirmation playable
    error      - Pipeline failed; carries a generic user-facing message

Exactly one ProcessingState is live at a time. An AnalysisResult exists
only while the state is completed.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionStatus(str, Enum):
    """Discrete controller states."""

    IDLE = "idle"
    RECORDING = "recording"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"


class ProcessingState(BaseModel):
    """
    Current controller state.

    Attributes:
        status: Discrete state
        error_message: Human-readable message, only set in error state
    """

    model_config = ConfigDict(frozen=True)

    status: SessionStatus = Field(
        default=SessionStatus.IDLE,
        description="Current discrete state",
    )

    error_message: Optional[str] = Field(
        default=None,
        description="User-facing message when status is error",
    )

    @classmethod
    def idle(cls) -> "ProcessingState":
        return cls(status=SessionStatus.IDLE)

    @classmethod
    def recording(cls) -> "ProcessingState":
        return cls(status=SessionStatus.RECORDING)

    @classmethod
    def analyzing(cls) -> "ProcessingState":
        return cls(status=SessionStatus.ANALYZING)

    @classmethod
    def completed(cls) -> "ProcessingState":
        return cls(status=SessionStatus.COMPLETED)

    @classmethod
    def error(cls, message: Optional[str] = None) -> "ProcessingState":
        return cls(status=SessionStatus.ERROR, error_message=message)

    def __repr__(self) -> str:
        if self.error_message:
            return f"ProcessingState({self.status.value}, {self.error_message!r})"
        return f"ProcessingState({self.status.value})"
