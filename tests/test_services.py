"""
Service Tests
=============

Analysis payload parsing, mock backends and the Gemini clients with a
stubbed transport.
"""

import json
from types import SimpleNamespace

import numpy as np
import pytest

from echo_therapy.services import (
    AnalysisError,
    GeminiAnalysisClient,
    GeminiSpeechClient,
    MockAnalysisClient,
    MockSpeechClient,
    SynthesisError,
    create_analysis_client,
    create_speech_client,
    parse_analysis_payload,
)
from echo_therapy.models.flower import FlowerStyle


class FakeModels:
    """Stands in for client.aio.models."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    async def generate_content(self, model, contents, config):
        self.requests.append(SimpleNamespace(model=model, contents=contents, config=config))
        if self.error is not None:
            raise self.error
        return self.response


def _client(models):
    return SimpleNamespace(aio=SimpleNamespace(models=models))


class TestParseAnalysisPayload:
    """Tests for strict payload validation."""

    def test_json_text(self, sample_payload):
        result = parse_analysis_payload(json.dumps(sample_payload))
        assert result.emotion == "Anxiety"

    def test_code_fence(self, sample_payload):
        text = "```json\n" + json.dumps(sample_payload) + "\n```"
        assert parse_analysis_payload(text).distress_score == 0.42

    def test_bytes(self, sample_payload):
        assert parse_analysis_payload(json.dumps(sample_payload).encode()).emotion == "Anxiety"

    @pytest.mark.parametrize("text", ["", "   ", "not json", "[1, 2, 3]", "42"])
    def test_rejects_non_objects(self, text):
        with pytest.raises(AnalysisError):
            parse_analysis_payload(text)

    def test_rejects_invalid_fields(self, sample_payload):
        sample_payload["flowerConfig"]["style"] = "wilting"
        with pytest.raises(AnalysisError) as exc:
            parse_analysis_payload(sample_payload)
        assert exc.value.kind == "analysis"


class TestMockAnalysisClient:
    """Tests for the offline analysis backend."""

    @pytest.mark.asyncio
    async def test_deterministic(self):
        client = MockAnalysisClient()
        a = await client.analyze(b"same bytes", "audio/webm")
        b = await client.analyze(b"same bytes", "audio/webm")
        assert a == b
        assert client.call_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("style", [s.value for s in FlowerStyle])
    async def test_forced_style(self, style):
        result = await MockAnalysisClient(style=style).analyze(b"x", "audio/webm")
        assert result.flower_config.style.value == style
        assert len(result.coping_plan) == 3

    @pytest.mark.asyncio
    async def test_unknown_style(self):
        with pytest.raises(AnalysisError):
            await MockAnalysisClient(style="wilting").analyze(b"x", "audio/webm")

    @pytest.mark.asyncio
    async def test_empty_media(self):
        with pytest.raises(AnalysisError):
            await MockAnalysisClient().analyze(b"", "audio/webm")


class TestMockSpeechClient:
    """Tests for the offline speech backend."""

    @pytest.mark.asyncio
    async def test_pcm_output(self):
        client = MockSpeechClient(sample_rate=8000)
        pcm = await client.synthesize("You are doing the best you can.")
        samples = np.frombuffer(pcm, dtype="<i2")
        assert len(pcm) % 2 == 0
        assert samples.shape[0] >= 4000
        assert np.abs(samples).max() <= 0.2 * 32767 + 1

    @pytest.mark.asyncio
    async def test_empty_text(self):
        with pytest.raises(SynthesisError):
            await MockSpeechClient().synthesize("  ")


class TestGeminiAnalysisClient:
    """Tests for the Gemini analysis client with a stubbed transport."""

    @pytest.mark.asyncio
    async def test_success(self, sample_payload):
        models = FakeModels(response=SimpleNamespace(text=json.dumps(sample_payload)))
        client = GeminiAnalysisClient(model="test-model", client=_client(models))

        result = await client.analyze(b"media", "audio/webm")

        assert result.emotion == "Anxiety"
        request = models.requests[0]
        assert request.model == "test-model"
        assert request.config.response_mime_type == "application/json"
        assert client.get_metrics()["api_call_count"] == 1

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = GeminiAnalysisClient(client=_client(FakeModels(error=ConnectionError("down"))))
        with pytest.raises(AnalysisError):
            await client.analyze(b"media", "audio/webm")
        assert client.get_metrics()["api_error_count"] == 1

    @pytest.mark.asyncio
    async def test_empty_text(self):
        client = GeminiAnalysisClient(client=_client(FakeModels(response=SimpleNamespace(text=None))))
        with pytest.raises(AnalysisError):
            await client.analyze(b"media", "audio/webm")

    @pytest.mark.asyncio
    async def test_invalid_payload(self):
        client = GeminiAnalysisClient(client=_client(FakeModels(response=SimpleNamespace(text='{"emotion": "x"}'))))
        with pytest.raises(AnalysisError):
            await client.analyze(b"media", "audio/webm")


class TestGeminiSpeechClient:
    """Tests for the Gemini TTS client with a stubbed transport."""

    @staticmethod
    def _response(data):
        part = SimpleNamespace(inline_data=SimpleNamespace(data=data))
        return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])

    @pytest.mark.asyncio
    async def test_success(self):
        models = FakeModels(response=self._response(b"\x00\x00\x00\x40"))
        client = GeminiSpeechClient(voice="Kore", client=_client(models))

        assert await client.synthesize("Breathe.") == b"\x00\x00\x00\x40"
        config = models.requests[0].config
        assert config.speech_config.voice_config.prebuilt_voice_config.voice_name == "Kore"

    @pytest.mark.asyncio
    async def test_no_audio(self):
        models = FakeModels(response=SimpleNamespace(candidates=[]))
        client = GeminiSpeechClient(client=_client(models))
        with pytest.raises(SynthesisError):
            await client.synthesize("Breathe.")


class TestFactories:
    """Backend selection by name."""

    def test_mock_backends(self):
        assert isinstance(create_analysis_client("mock"), MockAnalysisClient)
        assert isinstance(create_speech_client("mock"), MockSpeechClient)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_analysis_client("oracle")
        with pytest.raises(ValueError):
            create_speech_client("oracle")
