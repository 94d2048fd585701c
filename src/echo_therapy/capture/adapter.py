"""
Capture Adapters
================

Pluggable recording backends for the session controller.

Acquiring microphone or camera input is outside this package. Adapters only
have to honour the CaptureAdapter protocol: produce one bounded recording,
or raise CaptureError when the device is denied or unavailable. They must
signal denial rather than hang.

Adapters:
    - CaptureAdapter: Protocol
    - FileCaptureAdapter: Reads a pre-recorded file (CLI, demos)
"""

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Protocol, Union

from echo_therapy.capture.media import (
    MAX_CAPTURE_SECONDS,
    CapturedMedia,
    MediaKind,
)
from echo_therapy.errors import EchoTherapyError


logger = logging.getLogger(__name__)


class CaptureError(EchoTherapyError):
    """Raised when the recording device is denied or unavailable."""

    kind = "capture"


class CaptureAdapter(Protocol):
    """
    Protocol for recording backends.

    Implementations must stop on their own after max_seconds and still
    return the recording.
    """

    async def record(
        self,
        kind: MediaKind,
        max_seconds: float = MAX_CAPTURE_SECONDS,
    ) -> CapturedMedia:
        """
        Record one bounded media sample.

        Raises:
            CaptureError: If permission is denied or no device is available
        """
        ...


class FileCaptureAdapter:
    """
    Capture adapter that replays a recording from disk.

    The mime type is guessed from the file extension unless given.
    A missing or unreadable file is reported as CaptureError, the same way
    a denied microphone would be.
    """

    def __init__(
        self,
        path: Union[str, Path],
        mime_type: Optional[str] = None,
        duration_seconds: float = 0.0,
    ) -> None:
        self.path = Path(path)
        self.mime_type = mime_type
        self.duration_seconds = duration_seconds

    async def record(
        self,
        kind: MediaKind,
        max_seconds: float = MAX_CAPTURE_SECONDS,
    ) -> CapturedMedia:
        try:
            data = await asyncio.to_thread(self.path.read_bytes)
        except OSError as e:
            raise CaptureError(f"Cannot read recording {self.path}: {e}") from e

        if not data:
            raise CaptureError(f"Recording {self.path} is empty")

        mime_type = self.mime_type or mimetypes.guess_type(self.path.name)[0] or ""
        duration = min(self.duration_seconds, max_seconds)

        logger.info(
            f"Loaded recording {self.path.name}: {len(data)} bytes, "
            f"kind={kind.value}, mime={mime_type or '<default>'}"
        )

        return CapturedMedia(
            data=data,
            mime_type=mime_type,
            kind=kind,
            duration_seconds=duration,
        )
