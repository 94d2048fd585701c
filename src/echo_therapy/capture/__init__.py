"""
Capture Module
==============

Boundary types for recorded media.

Components:
    - MediaKind, CapturedMedia: What a finished recording looks like
    - resolve_mime_type: Container fallback by media kind
    - CaptureAdapter: Protocol for recording backends
    - FileCaptureAdapter: Replays a recording from disk
    - CaptureError: Device denied or unavailable
"""

from echo_therapy.capture.media import (
    MAX_CAPTURE_SECONDS,
    CapturedMedia,
    MediaKind,
    preferred_mime_type,
    resolve_mime_type,
)
from echo_therapy.capture.adapter import (
    CaptureAdapter,
    CaptureError,
    FileCaptureAdapter,
)

__all__ = [
    "MAX_CAPTURE_SECONDS",
    "CapturedMedia",
    "MediaKind",
    "preferred_mime_type",
    "resolve_mime_type",
    "CaptureAdapter",
    "CaptureError",
    "FileCaptureAdapter",
]
