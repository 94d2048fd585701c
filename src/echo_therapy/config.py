"""
EchoTherapy Configuration
=========================

This module handles configuration loading for the session pipeline.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    ECHO_CONFIG             -> path of the settings file
    ECHO_ANALYSIS_BACKEND   -> analysis.backend
    ECHO_ANALYSIS_TIMEOUT   -> analysis.timeout_seconds
    ECHO_SPEECH_BACKEND     -> speech.backend
    ECHO_SPEECH_TIMEOUT     -> speech.timeout_seconds
    ECHO_PLAYBACK_BACKEND   -> playback.backend
    ECHO_AUTOPLAY           -> playback.autoplay
    ECHO_LOG_LEVEL          -> logging.level
    ECHO_LOG_FORMAT         -> logging.format

Credentials are never read from config.yaml. The Gemini backends take the
API key from GEMINI_API_KEY (or GOOGLE_API_KEY), loaded from .env if present.

Example:
    from echo_therapy.config import settings

    print(settings.analysis.model)
    print(settings.speech.sample_rate)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Application identification configuration."""

    name: str = Field(default="EchoTherapy", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")


class AnalysisConfig(BaseModel):
    """Emotion analysis client configuration."""

    backend: str = Field(
        default="mock",
        description="Analysis backend: 'mock' or 'gemini'",
    )
    model: str = Field(
        default="gemini-3-pro-preview",
        description="Multimodal model used for emotion analysis",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound on one analysis call",
    )


class SpeechConfig(BaseModel):
    """Affirmation speech client configuration."""

    backend: str = Field(
        default="mock",
        description="Speech backend: 'mock' or 'gemini'",
    )
    model: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Text-to-speech model",
    )
    voice: str = Field(
        default="Kore",
        description="Prebuilt voice name",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound on one synthesis call",
    )
    sample_rate: int = Field(
        default=24000,
        gt=0,
        description="Sample rate of the raw PCM returned by the speech service",
    )


class CaptureConfig(BaseModel):
    """Media capture configuration."""

    max_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Recording auto-stops after this many seconds",
    )


class PlaybackConfig(BaseModel):
    """Audio playback configuration."""

    backend: str = Field(
        default="silent",
        description="Playback backend: 'silent' or 'sounddevice'",
    )
    autoplay: bool = Field(
        default=True,
        description="Play the affirmation as soon as the session completes",
    )


class VisualizationConfig(BaseModel):
    """Mood flower animation configuration."""

    base_bloom_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Bloom duration at bloom speed 1",
    )
    petal_stagger_ms: float = Field(
        default=300.0,
        ge=0,
        description="Total petal stagger at bloom speed 1",
    )
    rotation_step_deg: float = Field(
        default=0.2,
        ge=0,
        description="Ambient rotation per animation tick",
    )
    tick_ms: float = Field(
        default=50.0,
        gt=0,
        description="Animation tick interval",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for EchoTherapy.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

CONFIG_FILENAMES = ("config.yaml", "config.yml")

# Repository root, for editable installs run from elsewhere
PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _find_config_file() -> Optional[Path]:
    """ECHO_CONFIG, else config.yaml in the working directory or project root."""
    if env_path := os.environ.get("ECHO_CONFIG"):
        return Path(env_path)
    for directory in (Path.cwd(), PROJECT_ROOT):
        for name in CONFIG_FILENAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def _read_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Build Settings from defaults, config.yaml and ECHO_* variables.

    Later sources win: defaults < file < environment.

    Args:
        config_path: Explicit config file. When omitted, ECHO_CONFIG and
            then the usual locations are tried.

    Returns:
        Settings

    Raises:
        ValueError: If the file is not a mapping or a value fails validation
    """
    path = Path(config_path) if config_path else _find_config_file()

    config_data: dict = {}
    if path is not None and path.is_file():
        logger.info(f"Reading settings from {path}")
        config_data = _read_yaml(path)
    else:
        logger.debug("No settings file, using defaults and environment")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Analysis settings
    if env_backend := os.environ.get("ECHO_ANALYSIS_BACKEND"):
        config_data.setdefault("analysis", {})["backend"] = env_backend
    if env_timeout := os.environ.get("ECHO_ANALYSIS_TIMEOUT"):
        config_data.setdefault("analysis", {})["timeout_seconds"] = float(env_timeout)

    # Speech settings
    if env_backend := os.environ.get("ECHO_SPEECH_BACKEND"):
        config_data.setdefault("speech", {})["backend"] = env_backend
    if env_timeout := os.environ.get("ECHO_SPEECH_TIMEOUT"):
        config_data.setdefault("speech", {})["timeout_seconds"] = float(env_timeout)

    # Playback settings
    if env_playback := os.environ.get("ECHO_PLAYBACK_BACKEND"):
        config_data.setdefault("playback", {})["backend"] = env_playback
    if env_autoplay := os.environ.get("ECHO_AUTOPLAY"):
        config_data.setdefault("playback", {})["autoplay"] = _env_flag(env_autoplay)

    # Logging settings
    if env_log := os.environ.get("ECHO_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_format := os.environ.get("ECHO_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_format


LOG_FORMATS = {
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
    "text": "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
}

# Transport chatter from the Gemini SDK and LangGraph
QUIET_LOGGERS = ("httpx", "httpcore", "google_genai", "langgraph")


def setup_logging(settings: Settings) -> None:
    """Configure root logging from the logging section."""
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    log_format = LOG_FORMATS.get(settings.logging.format, LOG_FORMATS["text"])

    logging.basicConfig(level=level, format=log_format, datefmt="%Y-%m-%dT%H:%M:%S")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


# =============================================================================
# Global Settings Instance
# =============================================================================

settings = load_config()
