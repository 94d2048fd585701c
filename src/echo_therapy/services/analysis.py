"""
Emotion Analysis Clients
========================

Turn one recorded media sample into a validated AnalysisResult.

Backends:
    - AnalysisClient: Protocol consumed by the session controller
    - MockAnalysisClient: Deterministic, offline
    - GeminiAnalysisClient: Google Gemini multimodal model (google-genai)

Design Rules:
    - A response that fails schema validation is an AnalysisError,
      exactly like a transport failure
    - No automatic retries; retrying is always user-initiated
    - Log all remote calls
"""

import json
import logging
import os
import re
import zlib
from typing import Any, Optional, Protocol, Tuple, Union

from pydantic import ValidationError

from echo_therapy.errors import EchoTherapyError
from echo_therapy.models.analysis import AnalysisResult
from echo_therapy.services.prompts import (
    ANALYSIS_PROMPT,
    ANALYSIS_SCHEMA,
    RELAXED_SAFETY_CATEGORIES,
    SYSTEM_INSTRUCTION,
)


logger = logging.getLogger(__name__)


_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class AnalysisError(EchoTherapyError):
    """Raised when the analysis call fails or returns an invalid payload."""

    kind = "analysis"


class AnalysisClient(Protocol):
    """
    Protocol for emotion analysis backends.

    All implementations must provide an async `analyze` method that takes
    the recorded media and returns a schema-valid AnalysisResult.
    """

    async def analyze(self, media: bytes, mime_type: str) -> AnalysisResult:
        """
        Analyze a recorded sample.

        Args:
            media: Encoded media bytes
            mime_type: Container mime type of media

        Returns:
            Validated AnalysisResult

        Raises:
            AnalysisError: On transport failure or invalid payload
        """
        ...


def parse_analysis_payload(payload: Union[str, bytes, dict]) -> AnalysisResult:
    """
    Validate a raw analysis response.

    Accepts the JSON text returned by the service (optionally wrapped in a
    markdown code fence) or an already-decoded object.

    Raises:
        AnalysisError: If the payload is not JSON or fails validation
    """
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")

    if isinstance(payload, str):
        text = _CODE_FENCE.sub("", payload.strip())
        if not text:
            raise AnalysisError("Empty analysis response")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise AnalysisError(f"Analysis response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise AnalysisError(
            f"Analysis response must be a JSON object, got {type(payload).__name__}"
        )

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        raise AnalysisError(
            f"Analysis response failed validation ({e.error_count()} errors): {e}"
        ) from e


# =============================================================================
# Mock backend
# =============================================================================

# (emotion, style, color, intensity, bloom_speed, distress, summary, plan, affirmation)
_MOCK_PRESETS: Tuple[Tuple[Any, ...], ...] = (
    (
        "Frustration", "spiky", "#EF4444", 7, 4, 0.35,
        "It sounds like something has been pushing against you all day.",
        [
            "Unclench your jaw and drop your shoulders for three slow breaths.",
            "Press your palms together firmly for ten seconds, then release.",
            "Write the one thing you can control next, and only that.",
        ],
        "My friend, your frustration makes sense, and you can set it down for a moment.",
    ),
    (
        "Sadness", "drooping", "#6366F1", 5, 1, 0.55,
        "There is a heaviness in your voice, and it deserves gentle attention.",
        [
            "Breathe in for four counts and out for six, five times.",
            "Hold something warm and notice its weight in your hands.",
            "Name one small thing that felt okay today, however small.",
        ],
        "My friend, you are allowed to feel this, and you are not alone in it.",
    ),
    (
        "Anxiety", "trembling", "#8B5CF6", 6, 3, 0.45,
        "It sounds like your mind is racing ahead of you right now.",
        [
            "Breathe in for 4, hold for 7, and out for 8.",
            "Name five things you can see and four you can hear.",
            "Ask yourself what is actually happening in this exact minute.",
        ],
        "My friend, you are safe in this moment, and this feeling will pass.",
    ),
    (
        "Calm", "calm", "#10B981", 3, 2, 0.1,
        "You sound settled, like you've found a quiet place to stand.",
        [
            "Take three slow breaths and notice the pause at the top of each.",
            "Feel your feet on the floor and the support beneath you.",
            "Choose one intention to carry into the next hour.",
        ],
        "My friend, this steadiness is yours, and you can return to it anytime.",
    ),
    (
        "Hope", "particle", "#F59E0B", 8, 5, 0.05,
        "There is a brightness in how you speak, like something is opening up.",
        [
            "Smile gently and take one deep, full breath.",
            "Notice where in your body this lightness lives.",
            "Write down what made today feel possible.",
        ],
        "My friend, you deserve this hope, so let yourself hold it.",
    ),
)


class MockAnalysisClient:
    """
    Deterministic analysis backend for offline runs and testing.

    The preset is chosen from a checksum of the media bytes, so the same
    recording always yields the same reflection. A preset can be forced by
    emotion style.
    """

    def __init__(self, style: Optional[str] = None) -> None:
        self.style = style
        self.call_count = 0

    def _select_preset(self, media: bytes) -> Tuple[Any, ...]:
        if self.style is not None:
            for preset in _MOCK_PRESETS:
                if preset[1] == self.style:
                    return preset
            raise AnalysisError(f"Unknown mock style: {self.style!r}")
        return _MOCK_PRESETS[zlib.crc32(media) % len(_MOCK_PRESETS)]

    async def analyze(self, media: bytes, mime_type: str) -> AnalysisResult:
        self.call_count += 1
        if not media:
            raise AnalysisError("Cannot analyze an empty recording")

        (emotion, style, color, intensity, bloom, distress,
         summary, plan, affirmation) = self._select_preset(media)

        logger.info(f"Mock analysis: {len(media)} bytes of {mime_type} -> {emotion}")

        return parse_analysis_payload({
            "emotion": emotion,
            "empathySummary": summary,
            "copingPlan": list(plan),
            "flowerConfig": {
                "baseColor": color,
                "intensity": intensity,
                "bloomSpeed": bloom,
                "style": style,
            },
            "affirmationText": affirmation,
            "distressScore": distress,
        })


# =============================================================================
# Gemini backend
# =============================================================================

def resolve_api_key(api_key: Optional[str] = None) -> Optional[str]:
    """Explicit key, else GEMINI_API_KEY / GOOGLE_API_KEY (after loading .env)."""
    if api_key:
        return api_key
    from dotenv import load_dotenv

    load_dotenv()
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


class GeminiAnalysisClient:
    """
    Production analysis backend using a Gemini multimodal model.

    The media is sent inline with a JSON response schema; the response text
    is then validated strictly against AnalysisResult.

    Attributes:
        model: Gemini model name
    """

    def __init__(
        self,
        model: str = "gemini-3-pro-preview",
        api_key: Optional[str] = None,
        client: Any = None,
    ) -> None:
        """
        Initialize Gemini analysis client.

        Args:
            model: Model name
            api_key: API key (defaults to GEMINI_API_KEY / GOOGLE_API_KEY)
            client: Pre-built genai.Client (tests)
        """
        self.model = model
        self._api_call_count = 0
        self._api_error_count = 0

        try:
            from google.genai import types
        except ImportError:
            raise ImportError(
                "google-genai is required for GeminiAnalysisClient. "
                "Install with: pip install google-genai"
            )
        self._types = types
        self._client = client if client is not None else self._init_client(api_key)

        logger.info(f"GeminiAnalysisClient initialized: model={model}")

    def _init_client(self, api_key: Optional[str]):
        from google import genai

        try:
            return genai.Client(api_key=resolve_api_key(api_key))
        except Exception as e:
            raise AnalysisError(f"Failed to initialize Gemini client: {e}") from e

    def _build_config(self):
        types = self._types
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=ANALYSIS_SCHEMA,
            safety_settings=[
                types.SafetySetting(
                    category=category,
                    threshold="BLOCK_ONLY_HIGH",
                )
                for category in RELAXED_SAFETY_CATEGORIES
            ],
        )

    async def analyze(self, media: bytes, mime_type: str) -> AnalysisResult:
        if not media:
            raise AnalysisError("Cannot analyze an empty recording")

        media_part = self._types.Part.from_bytes(data=media, mime_type=mime_type)
        logger.info(f"Analyzing {len(media)} bytes of {mime_type} with {self.model}")

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=[media_part, ANALYSIS_PROMPT],
                config=self._build_config(),
            )
            self._api_call_count += 1
        except Exception as e:
            self._api_error_count += 1
            raise AnalysisError(f"Gemini analysis call failed: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            self._api_error_count += 1
            raise AnalysisError("No response text from Gemini")

        return parse_analysis_payload(text)

    def get_metrics(self) -> dict:
        """Get client metrics for observability."""
        return {
            "model": self.model,
            "api_call_count": self._api_call_count,
            "api_error_count": self._api_error_count,
        }


def create_analysis_client(backend: str, model: Optional[str] = None) -> AnalysisClient:
    """Create an analysis backend by configured name."""
    if backend == "mock":
        return MockAnalysisClient()
    if backend == "gemini":
        return GeminiAnalysisClient(model=model) if model else GeminiAnalysisClient()
    raise ValueError(f"Unknown analysis backend: {backend!r}")
