"""
Captured Media
==============

Internal representation of one finished recording.

This module defines the typed CapturedMedia class that is used as the
interface between the capture adapter and the session controller.

Design Rules:
    - Recordings are bounded to MAX_CAPTURE_SECONDS
    - Media bytes are passed through unchanged (no transcoding)
    - kind only selects the fallback container mime type
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


MAX_CAPTURE_SECONDS = 30.0


class MediaKind(str, Enum):
    """What the user chose to share."""

    AUDIO = "audio"
    VIDEO = "video"


# Preferred containers, best first.
VIDEO_MIME_TYPES: Tuple[str, ...] = (
    "video/webm;codecs=vp8,opus",
    "video/webm",
    "video/mp4",
)

AUDIO_MIME_TYPES: Tuple[str, ...] = (
    "audio/webm;codecs=opus",
    "audio/webm",
    "audio/mp4",
    "audio/ogg",
)

FALLBACK_MIME_TYPES = {
    MediaKind.AUDIO: "audio/webm",
    MediaKind.VIDEO: "video/webm",
}


def preferred_mime_type(kind: MediaKind, supported: Iterable[str]) -> str:
    """
    Pick the first preferred container the recorder supports.

    Args:
        kind: Audio or video recording
        supported: Mime types the recording backend can produce

    Returns:
        Mime type, or "" when nothing matches (recorder default)
    """
    supported = set(supported)
    candidates = VIDEO_MIME_TYPES if kind == MediaKind.VIDEO else AUDIO_MIME_TYPES
    return next((t for t in candidates if t in supported), "")


def resolve_mime_type(mime_type: Optional[str], kind: MediaKind) -> str:
    """Use the recorder's mime type, or fall back by media kind."""
    if mime_type and mime_type.strip():
        return mime_type.strip()
    return FALLBACK_MIME_TYPES[MediaKind(kind)]


@dataclass(frozen=True, slots=True)
class CapturedMedia:
    """
    Finished recording handed to the session controller.

    Attributes:
        data: Encoded media bytes (container format given by mime_type)
        mime_type: Container mime type reported by the recorder (may be empty)
        kind: Audio-only or audio+video
        duration_seconds: Recorded length, never above MAX_CAPTURE_SECONDS
    """

    data: bytes
    mime_type: str
    kind: MediaKind
    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.duration_seconds < 0:
            raise ValueError("duration_seconds must be non-negative")

    @property
    def resolved_mime_type(self) -> str:
        return resolve_mime_type(self.mime_type, self.kind)

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the media bytes."""
        return (
            f"CapturedMedia(kind={self.kind.value}, "
            f"mime_type={self.mime_type!r}, "
            f"bytes={len(self.data)}, "
            f"duration={self.duration_seconds:.1f}s)"
        )
