"""
Test Configuration
==================

Pytest fixtures and test configuration for EchoTherapy.
"""

import asyncio

import pytest

from echo_therapy.audio.playback import AudioPlayer, SilentSink
from echo_therapy.models.analysis import AnalysisResult
from echo_therapy.models.flower import FlowerConfig, FlowerStyle


@pytest.fixture
def sample_payload():
    """Provide a valid camelCase analysis payload."""
    return {
        "emotion": "Anxiety",
        "empathySummary": "It sounds like a lot is pressing on you right now.",
        "copingPlan": [
            "Breathe in for 4 counts, hold for 7, out for 8.",
            "Name five things you can see around you.",
            "Write down the one worry that feels loudest.",
        ],
        "flowerConfig": {
            "baseColor": "#8B5CF6",
            "intensity": 7,
            "bloomSpeed": 2,
            "style": "trembling",
        },
        "affirmationText": "My friend, you are doing the best you can.",
        "distressScore": 0.42,
    }


@pytest.fixture
def sample_result(sample_payload):
    """Provide a validated AnalysisResult."""
    return AnalysisResult.model_validate(sample_payload)


@pytest.fixture
def make_result(sample_payload):
    """Factory for AnalysisResults with overridden fields."""
    def _make(**overrides):
        payload = dict(sample_payload)
        flower = dict(payload["flowerConfig"])
        for key in ("baseColor", "intensity", "bloomSpeed", "style"):
            if key in overrides:
                flower[key] = overrides.pop(key)
        payload["flowerConfig"] = flower
        payload.update(overrides)
        return AnalysisResult.model_validate(payload)
    return _make


@pytest.fixture
def flower_config():
    """Provide a FlowerConfig for scene tests."""
    return FlowerConfig(
        base_color="#10B981",
        intensity=5,
        bloom_speed=2,
        style=FlowerStyle.CALM,
    )


class FakeAnalysisClient:
    """Returns a fixed result, optionally after a gate or with an error."""

    def __init__(self, result=None, error=None, gate=None, delay=0.0):
        self.result = result
        self.error = error
        self.gate = gate
        self.delay = delay
        self.calls = []

    async def analyze(self, media, mime_type):
        self.calls.append((media, mime_type))
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class FakeSpeechClient:
    """Returns fixed PCM bytes, or raises."""

    def __init__(self, pcm=b"\x00\x00\x00\x40" * 2400, error=None, delay=0.0):
        self.pcm = pcm
        self.error = error
        self.delay = delay
        self.calls = []

    async def synthesize(self, text):
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.pcm


class RecordingSink(SilentSink):
    """SilentSink that keeps every voice it started."""

    def __init__(self):
        super().__init__()
        self.voices = []

    def start(self, audio):
        voice = super().start(audio)
        self.voices.append(voice)
        return voice


@pytest.fixture
def analysis_factory():
    """Build FakeAnalysisClients inside a test."""
    return FakeAnalysisClient


@pytest.fixture
def speech_factory():
    """Build FakeSpeechClients inside a test."""
    return FakeSpeechClient


@pytest.fixture
def fake_analysis(sample_result):
    return FakeAnalysisClient(result=sample_result)


@pytest.fixture
def fake_speech():
    return FakeSpeechClient()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def player(sink):
    return AudioPlayer(sink)
