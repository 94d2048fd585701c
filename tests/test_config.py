"""
Configuration Tests
===================

YAML loading and ECHO_* environment overrides.
"""

import logging

import pytest

from echo_therapy.config import Settings, load_config, setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ECHO_ANALYSIS_BACKEND", "ECHO_ANALYSIS_TIMEOUT",
        "ECHO_SPEECH_BACKEND", "ECHO_SPEECH_TIMEOUT",
        "ECHO_PLAYBACK_BACKEND", "ECHO_AUTOPLAY",
        "ECHO_LOG_LEVEL", "ECHO_LOG_FORMAT", "ECHO_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Settings without a file or environment."""

    def test_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "absent.yaml"))
        assert settings.analysis.backend == "mock"
        assert settings.analysis.timeout_seconds == 60.0
        assert settings.speech.voice == "Kore"
        assert settings.speech.sample_rate == 24000
        assert settings.capture.max_seconds == 30.0
        assert settings.playback.autoplay is True
        assert settings.visualization.rotation_step_deg == 0.2


class TestYamlLoading:
    """Values from config.yaml."""

    def test_file_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "analysis:\n"
            "  backend: gemini\n"
            "  timeout_seconds: 45\n"
            "playback:\n"
            "  autoplay: false\n"
        )
        settings = load_config(str(path))
        assert settings.analysis.backend == "gemini"
        assert settings.analysis.timeout_seconds == 45.0
        assert settings.playback.autoplay is False
        assert settings.speech.backend == "mock"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path)) == Settings()

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(str(path))

    def test_echo_config_variable(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("capture:\n  max_seconds: 10\n")
        monkeypatch.setenv("ECHO_CONFIG", str(path))
        assert load_config().capture.max_seconds == 10.0


class TestEnvOverrides:
    """Environment wins over the file."""

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("speech:\n  backend: mock\n  timeout_seconds: 10\n")
        monkeypatch.setenv("ECHO_SPEECH_BACKEND", "gemini")
        monkeypatch.setenv("ECHO_SPEECH_TIMEOUT", "12.5")

        settings = load_config(str(path))
        assert settings.speech.backend == "gemini"
        assert settings.speech.timeout_seconds == 12.5

    @pytest.mark.parametrize("value,expected", [("0", False), ("false", False), ("yes", True), ("1", True)])
    def test_autoplay_flag(self, tmp_path, monkeypatch, value, expected):
        monkeypatch.setenv("ECHO_AUTOPLAY", value)
        assert load_config(str(tmp_path / "absent.yaml")).playback.autoplay is expected

    def test_logging_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ECHO_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ECHO_LOG_FORMAT", "json")
        settings = load_config(str(tmp_path / "absent.yaml"))
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "json"

    def test_invalid_timeout_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ECHO_ANALYSIS_TIMEOUT", "0")
        with pytest.raises(ValueError):
            load_config(str(tmp_path / "absent.yaml"))


class TestSetupLogging:
    """Logging configuration."""

    def test_sets_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        settings = Settings.model_validate({"logging": {"level": "warning", "format": "json"}})

        setup_logging(settings)

        assert calls[0]["level"] == logging.WARNING
        assert calls[0]["format"].startswith("{")
