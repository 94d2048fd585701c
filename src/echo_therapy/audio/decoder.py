"""
PCM Decoder
===========

Dedicated module for decoding raw speech-service audio into float samples.

The speech service returns headerless audio:
    - 16-bit signed integers, little-endian
    - mono
    - 24 kHz

Design Rules:
    - This is the ONLY place in the codebase that decodes audio
    - Samples are normalized by 32768.0, so values lie in [-1.0, 1.0)
    - Fails fast on malformed payloads
"""

import logging
from dataclasses import dataclass

import numpy as np

from echo_therapy.errors import EchoTherapyError


logger = logging.getLogger(__name__)


PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2
PCM_SCALE = 32768.0


class DecodeError(EchoTherapyError):
    """Raised when the PCM payload is malformed."""

    kind = "decode"


@dataclass(frozen=True)
class DecodedAudio:
    """
    In-memory decoded audio buffer.

    Attributes:
        samples: float32 samples in [-1.0, 1.0), shape (N,)
        sample_rate: Samples per second
        channels: Always 1 (mono)
    """

    samples: np.ndarray
    sample_rate: int = PCM_SAMPLE_RATE
    channels: int = PCM_CHANNELS

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frame_count / self.sample_rate

    def __repr__(self) -> str:
        return (
            f"DecodedAudio(frames={self.frame_count}, "
            f"rate={self.sample_rate}, duration={self.duration:.2f}s)"
        )


def decode_pcm16(data: bytes, sample_rate: int = PCM_SAMPLE_RATE) -> DecodedAudio:
    """
    Decode raw little-endian int16 mono PCM to float samples.

    Args:
        data: Raw PCM bytes (no container framing)
        sample_rate: Sample rate of the payload

    Returns:
        DecodedAudio with float32 samples

    Raises:
        DecodeError: If the payload is empty, has an odd byte length,
            or the sample rate is invalid
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"PCM payload must be bytes, got {type(data).__name__}")
    if sample_rate <= 0:
        raise DecodeError(f"Invalid sample rate: {sample_rate}")

    size = len(data)
    if size == 0:
        raise DecodeError("PCM payload is empty")
    if size % PCM_SAMPLE_WIDTH != 0:
        raise DecodeError(
            f"PCM payload has odd length {size}; expected whole 16-bit samples"
        )

    pcm = np.frombuffer(data, dtype="<i2")
    samples = (pcm.astype(np.float32) / PCM_SCALE)

    logger.debug(f"Decoded {pcm.shape[0]} PCM samples at {sample_rate} Hz")

    return DecodedAudio(samples=samples, sample_rate=sample_rate)
