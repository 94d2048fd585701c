"""
Affirmation Speech Clients
==========================

Render the affirmation text as raw PCM audio.

Output format (both backends):
    - 16-bit signed little-endian samples
    - mono, 24 kHz
    - no header or container

Backends:
    - SpeechClient: Protocol consumed by the session controller
    - MockSpeechClient: Soft tone whose length follows the text
    - GeminiSpeechClient: Gemini TTS with a prebuilt voice (google-genai)
"""

import logging
from typing import Any, Optional, Protocol

import numpy as np

from echo_therapy.audio.decoder import PCM_SAMPLE_RATE
from echo_therapy.errors import EchoTherapyError
from echo_therapy.services.analysis import resolve_api_key


logger = logging.getLogger(__name__)


class SynthesisError(EchoTherapyError):
    """Raised when speech synthesis fails or returns no audio."""

    kind = "synthesis"


class SpeechClient(Protocol):
    """Protocol for text-to-speech backends."""

    async def synthesize(self, text: str) -> bytes:
        """
        Speak text.

        Returns:
            Raw PCM bytes (int16 LE, mono, 24 kHz)

        Raises:
            SynthesisError: On failure or empty audio
        """
        ...


class MockSpeechClient:
    """
    Offline speech backend.

    Produces a quiet sine tone, roughly as long as the text would take to
    read aloud, with short fades to avoid clicks.
    """

    SECONDS_PER_CHAR = 0.06
    MAX_SECONDS = 12.0

    def __init__(
        self,
        sample_rate: int = PCM_SAMPLE_RATE,
        frequency: float = 220.0,
        amplitude: float = 0.2,
    ) -> None:
        self.sample_rate = sample_rate
        self.frequency = frequency
        self.amplitude = amplitude
        self.call_count = 0

    async def synthesize(self, text: str) -> bytes:
        self.call_count += 1
        if not text or not text.strip():
            raise SynthesisError("Cannot synthesize empty text")

        seconds = min(self.MAX_SECONDS, max(0.5, len(text) * self.SECONDS_PER_CHAR))
        n = int(self.sample_rate * seconds)
        t = np.arange(n) / self.sample_rate
        wave = self.amplitude * np.sin(2 * np.pi * self.frequency * t)

        fade = min(n // 2, int(0.05 * self.sample_rate))
        if fade:
            ramp = np.linspace(0.0, 1.0, fade)
            wave[:fade] *= ramp
            wave[-fade:] *= ramp[::-1]

        pcm = np.clip(wave * 32767, -32768, 32767).astype("<i2")
        logger.info(f"Mock speech: {len(text)} chars -> {seconds:.1f}s of PCM")
        return pcm.tobytes()


class GeminiSpeechClient:
    """
    Production speech backend using Gemini text-to-speech.

    Attributes:
        model: TTS model name
        voice: Prebuilt voice name (Kore is warm and neutral)
    """

    def __init__(
        self,
        model: str = "gemini-2.5-flash-preview-tts",
        voice: str = "Kore",
        api_key: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.model = model
        self.voice = voice
        self._api_call_count = 0
        self._api_error_count = 0

        try:
            from google.genai import types
        except ImportError:
            raise ImportError(
                "google-genai is required for GeminiSpeechClient. "
                "Install with: pip install google-genai"
            )
        self._types = types
        self._client = client if client is not None else self._init_client(api_key)

        logger.info(f"GeminiSpeechClient initialized: model={model}, voice={voice}")

    def _init_client(self, api_key: Optional[str]):
        from google import genai

        try:
            return genai.Client(api_key=resolve_api_key(api_key))
        except Exception as e:
            raise SynthesisError(f"Failed to initialize Gemini client: {e}") from e

    def _build_config(self):
        types = self._types
        return types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=self.voice,
                    )
                )
            ),
        )

    async def synthesize(self, text: str) -> bytes:
        if not text or not text.strip():
            raise SynthesisError("Cannot synthesize empty text")

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=text,
                config=self._build_config(),
            )
            self._api_call_count += 1
        except Exception as e:
            self._api_error_count += 1
            raise SynthesisError(f"Gemini TTS call failed: {e}") from e

        audio = _first_inline_audio(response)
        if not audio:
            self._api_error_count += 1
            raise SynthesisError("No audio generated")

        logger.info(f"Gemini TTS: {len(text)} chars -> {len(audio)} bytes of PCM")
        return audio

    def get_metrics(self) -> dict:
        """Get client metrics for observability."""
        return {
            "model": self.model,
            "voice": self.voice,
            "api_call_count": self._api_call_count,
            "api_error_count": self._api_error_count,
        }


def _first_inline_audio(response: Any) -> Optional[bytes]:
    """Return the inline data of the first candidate part, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data:
            return bytes(inline.data)
    return None


def create_speech_client(
    backend: str,
    model: Optional[str] = None,
    voice: Optional[str] = None,
    sample_rate: int = PCM_SAMPLE_RATE,
) -> SpeechClient:
    """Create a speech backend by configured name."""
    if backend == "mock":
        return MockSpeechClient(sample_rate=sample_rate)
    if backend == "gemini":
        kwargs = {}
        if model:
            kwargs["model"] = model
        if voice:
            kwargs["voice"] = voice
        return GeminiSpeechClient(**kwargs)
    raise ValueError(f"Unknown speech backend: {backend!r}")
