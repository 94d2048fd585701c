"""
Flower Models
=============

Compact descriptor that fully parameterizes the mood flower visualization.

The descriptor is produced by emotion analysis and consumed by the
visualization engine. Its numeric fields feed directly into geometry math
(petal count, offsets, scale, animation duration), so a FlowerConfig can
never hold an out-of-range value:

    intensity   ∈ [1, 10]   (petal count, core radius, petal offset/scale)
    bloom_speed ∈ [1, 5]    (divides bloom duration and petal stagger)

Two construction paths exist:
    - FlowerConfig.model_validate(...)  strict, raises on out-of-range values
    - FlowerConfig.clamped(...)         lenient, clamps numbers into range

Example:
    from echo_therapy.models.flower import FlowerConfig, FlowerStyle

    config = FlowerConfig(
        base_color="#10B981",
        intensity=4,
        bloom_speed=2,
        style=FlowerStyle.CALM,
    )
"""

import math
import re
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

INTENSITY_MIN = 1
INTENSITY_MAX = 10
BLOOM_SPEED_MIN = 1
BLOOM_SPEED_MAX = 5


class FlowerStyle(str, Enum):
    """
    Closed set of visual styles for the mood flower.

    Each style owns exactly one petal path and one placement rule
    (see echo_therapy.visualization.petals).

    Attributes:
        SPIKY: Sharp, angular petals (anger, frustration)
        DROOPING: Heavy petals that hang and never rotate (sadness, grief)
        TREMBLING: Thin, short petals with jitter (anxiety, fear)
        CALM: Balanced, lotus-like petals with a pulsing core (calm, neutral)
        PARTICLE: Wide open petals with floating particles (happiness, hope)
    """

    SPIKY = "spiky"
    DROOPING = "drooping"
    TREMBLING = "trembling"
    CALM = "calm"
    PARTICLE = "particle"


def _coerce_number(value: Any, name: str) -> float:
    """Reject booleans, strings and other non-numeric inputs."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {type(value).__name__}")
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"{name} must be finite")
    return float(value)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class FlowerConfig(BaseModel):
    """
    Structured emotional descriptor for the visualization engine.

    Field names are snake_case; the camelCase names used by the analysis
    service (baseColor, bloomSpeed) are accepted as aliases.

    Attributes:
        base_color: Dominant hue of the scene as a hex string
        intensity: Emotional intensity, 1-10
        bloom_speed: Bloom animation speed, 1 (slow) to 5 (fast)
        style: Visual style selecting petal shape and behaviour
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    base_color: str = Field(
        ...,
        alias="baseColor",
        description="Hex color code (#RGB or #RRGGBB)",
    )

    intensity: int = Field(
        ...,
        ge=INTENSITY_MIN,
        le=INTENSITY_MAX,
        description="Intensity of emotion from 1 to 10",
    )

    bloom_speed: int = Field(
        ...,
        alias="bloomSpeed",
        ge=BLOOM_SPEED_MIN,
        le=BLOOM_SPEED_MAX,
        description="Speed of bloom animation from 1 (slow) to 5 (fast)",
    )

    style: FlowerStyle = Field(
        ...,
        description="Visual style of the flower",
    )

    @field_validator("base_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Ensure the colour is a hex string."""
        v = v.strip()
        if not HEX_COLOR_PATTERN.match(v):
            raise ValueError(f"base_color must be a hex color, got {v!r}")
        return v

    @field_validator("intensity", "bloom_speed", mode="before")
    @classmethod
    def validate_integral(cls, v: Any, info) -> int:
        """
        Accept whole-valued numbers only.

        The analysis service returns JSON numbers, so 4.0 is fine,
        but 4.5 or "4" is not.
        """
        number = _coerce_number(v, info.field_name)
        if not number.is_integer():
            raise ValueError(f"{info.field_name} must be a whole number, got {v}")
        return int(number)

    @classmethod
    def clamped(
        cls,
        base_color: str,
        intensity: Union[int, float],
        bloom_speed: Union[int, float],
        style: Union[FlowerStyle, str],
    ) -> "FlowerConfig":
        """
        Build a config, clamping numeric fields into range.

        Non-numeric values are still rejected. Style must be one of the
        enumerated values.

        Raises:
            ValueError: If a value is missing, non-numeric or unknown
        """
        i = _coerce_number(intensity, "intensity")
        b = _coerce_number(bloom_speed, "bloom_speed")
        return cls(
            base_color=base_color,
            intensity=int(clamp(round_half_up(i), INTENSITY_MIN, INTENSITY_MAX)),
            bloom_speed=int(clamp(round_half_up(b), BLOOM_SPEED_MIN, BLOOM_SPEED_MAX)),
            style=FlowerStyle(style),
        )
