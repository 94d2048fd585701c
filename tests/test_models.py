"""
Model Tests
===========

Validation of FlowerConfig, AnalysisResult and ProcessingState.
"""

import pytest
from pydantic import ValidationError

from echo_therapy.models import (
    AnalysisResult,
    FlowerConfig,
    FlowerStyle,
    ProcessingState,
    SessionStatus,
)
from echo_therapy.models.analysis import CRISIS_RESOURCES, needs_crisis_support


class TestFlowerConfig:
    """Tests for the flower descriptor."""

    def test_accepts_aliases(self):
        config = FlowerConfig.model_validate({
            "baseColor": "#EF4444",
            "intensity": 7,
            "bloomSpeed": 4,
            "style": "spiky",
        })
        assert config.base_color == "#EF4444"
        assert config.bloom_speed == 4
        assert config.style == FlowerStyle.SPIKY

    def test_accepts_field_names(self):
        config = FlowerConfig(base_color="#abc", intensity=1, bloom_speed=1, style="calm")
        assert config.style == FlowerStyle.CALM

    def test_whole_floats_are_accepted(self):
        config = FlowerConfig(base_color="#abc", intensity=4.0, bloom_speed=2.0, style="calm")
        assert config.intensity == 4
        assert isinstance(config.intensity, int)

    @pytest.mark.parametrize("intensity", [0, 11, 4.5, "4", True, None])
    def test_rejects_bad_intensity(self, intensity):
        with pytest.raises(ValidationError):
            FlowerConfig(base_color="#abc", intensity=intensity, bloom_speed=2, style="calm")

    @pytest.mark.parametrize("bloom_speed", [0, 6, float("nan")])
    def test_rejects_bad_bloom_speed(self, bloom_speed):
        with pytest.raises(ValidationError):
            FlowerConfig(base_color="#abc", intensity=5, bloom_speed=bloom_speed, style="calm")

    @pytest.mark.parametrize("color", ["red", "#12345", "123456", ""])
    def test_rejects_non_hex_color(self, color):
        with pytest.raises(ValidationError):
            FlowerConfig(base_color=color, intensity=5, bloom_speed=2, style="calm")

    def test_rejects_unknown_style(self):
        with pytest.raises(ValidationError):
            FlowerConfig(base_color="#abc", intensity=5, bloom_speed=2, style="wilting")

    def test_is_frozen(self, flower_config):
        with pytest.raises(ValidationError):
            flower_config.intensity = 9

    def test_clamped_constructor(self):
        config = FlowerConfig.clamped("#abc", intensity=42, bloom_speed=-3, style="particle")
        assert config.intensity == 10
        assert config.bloom_speed == 1

    def test_clamped_rounds_half_up(self):
        config = FlowerConfig.clamped("#abc", intensity=4.5, bloom_speed=2.5, style="calm")
        assert config.intensity == 5
        assert config.bloom_speed == 3

    def test_clamped_still_rejects_non_numbers(self):
        with pytest.raises(ValueError):
            FlowerConfig.clamped("#abc", intensity="loud", bloom_speed=2, style="calm")


class TestAnalysisResult:
    """Tests for the analysis payload."""

    def test_parses_payload(self, sample_payload):
        result = AnalysisResult.model_validate(sample_payload)
        assert result.emotion == "Anxiety"
        assert result.flower_config.style == FlowerStyle.TREMBLING
        assert len(result.coping_plan) == 3
        assert result.coping_plan[0].startswith("Breathe")

    @pytest.mark.parametrize("field", [
        "emotion", "empathySummary", "copingPlan",
        "flowerConfig", "affirmationText", "distressScore",
    ])
    def test_every_field_is_required(self, sample_payload, field):
        del sample_payload[field]
        with pytest.raises(ValidationError):
            AnalysisResult.model_validate(sample_payload)

    @pytest.mark.parametrize("plan", [
        ["one", "two"],
        ["one", "two", "three", "four"],
        ["one", "  ", "three"],
    ])
    def test_coping_plan_must_have_three_steps(self, sample_payload, plan):
        sample_payload["copingPlan"] = plan
        with pytest.raises(ValidationError):
            AnalysisResult.model_validate(sample_payload)

    @pytest.mark.parametrize("score", [-0.01, 1.01, True])
    def test_distress_score_range(self, sample_payload, score):
        sample_payload["distressScore"] = score
        with pytest.raises(ValidationError):
            AnalysisResult.model_validate(sample_payload)

    def test_blank_text_rejected(self, sample_payload):
        sample_payload["affirmationText"] = "   "
        with pytest.raises(ValidationError):
            AnalysisResult.model_validate(sample_payload)

    def test_crisis_boundary(self, make_result):
        assert not make_result(distressScore=0.80).needs_crisis_support
        assert make_result(distressScore=0.81).needs_crisis_support
        assert not needs_crisis_support(0.8)
        assert needs_crisis_support(1.0)

    def test_crisis_resources_are_fixed(self):
        labels = [r.label for r in CRISIS_RESOURCES]
        contacts = [r.contact for r in CRISIS_RESOURCES]
        assert labels == ["US Crisis Line", "Crisis Text Line"]
        assert contacts == ["988", "Text HOME to 741741"]

    @pytest.mark.parametrize("emotion,expected", [
        ("Joy", True),
        ("Relief", True),
        ("Happiness", True),
        ("hopeful", True),
        ("Sadness", False),
        ("Calm", False),
        ("Hopelessness", False),
        ("Unhappy", False),
        ("Relieved but tired", True),
    ])
    def test_is_affirmative(self, make_result, emotion, expected):
        assert make_result(emotion=emotion).is_affirmative is expected

    def test_to_payload_uses_wire_names(self, sample_payload, sample_result):
        assert sample_result.to_payload() == sample_payload


class TestProcessingState:
    """Tests for controller state values."""

    def test_default_is_idle(self):
        state = ProcessingState()
        assert state.status == SessionStatus.IDLE
        assert state.error_message is None

    def test_error_carries_message(self):
        state = ProcessingState.error("nope")
        assert state.status == SessionStatus.ERROR
        assert state.error_message == "nope"
        assert "nope" in repr(state)

    def test_states_compare_by_value(self):
        assert ProcessingState.analyzing() == ProcessingState(status=SessionStatus.ANALYZING)
