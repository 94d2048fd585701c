"""
Mood Flower Engine
==================

Pure mapping from (FlowerConfig, elapsed time) to a vector Scene.

This module generates PURELY DESCRIPTIVE artifacts. It never reads or
mutates controller state, and never waits on pipeline I/O.

Scene layers:
    - Centre glyph (radius 15 + intensity; pulses for calm)
    - N petals, N = clamp(round(intensity * 2.5), 6, 24)
    - Optional particles (particle style only)

Animation:
    - Bloom-in: scene scale 0 -> 1 with an overshoot easing over
      base_bloom_seconds / bloom_speed; petal i is delayed by
      i * (petal_stagger / bloom_speed / N)
    - Ambient rotation: rotation_step_deg per tick, forever,
      except drooping which never rotates
    - Trembling: per-petal sinusoidal jitter with a random phase

Determinism:
    All geometry is deterministic. Randomness (particle layout, tremble
    phases) comes only from a random.Random seeded by the caller, so the
    same config and seed always reproduce the same scene.
"""

import asyncio
import logging
import math
import random
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Optional, Sequence, Tuple

from echo_therapy.models.analysis import AnalysisResult
from echo_therapy.models.flower import FlowerConfig, FlowerStyle, clamp, round_half_up
from echo_therapy.visualization.petals import policy_for


logger = logging.getLogger(__name__)


MIN_PETALS = 6
MAX_PETALS = 24

PARTICLE_COUNT = 12
PARTICLE_RADIUS_RANGE = (2.0, 6.0)
PARTICLE_SPREAD = 150.0
PARTICLE_MAX_DELAY = 2.0

PULSE_PERIOD_SECONDS = 4.0
PULSE_EXTRA_RADIUS = 5.0

TREMBLE_AMPLITUDE_DEG = 3.0
TREMBLE_PERIOD_SECONDS = 0.3

# cubic-bezier(0.34, 1.56, 0.64, 1): overshoots past 1 before settling
BLOOM_EASING = (0.34, 1.56, 0.64, 1.0)


@dataclass(frozen=True)
class AnimationTiming:
    """
    Timing constants for the bloom and ambient animations.

    Attributes:
        base_bloom_seconds: Bloom duration at bloom speed 1
        petal_stagger_ms: Total petal stagger at bloom speed 1
        rotation_step_deg: Rotation added per tick
        tick_ms: Tick interval
    """

    base_bloom_seconds: float = 3.0
    petal_stagger_ms: float = 300.0
    rotation_step_deg: float = 0.2
    tick_ms: float = 50.0

    @classmethod
    def from_settings(cls, viz) -> "AnimationTiming":
        """Build from a VisualizationConfig section."""
        return cls(
            base_bloom_seconds=viz.base_bloom_seconds,
            petal_stagger_ms=viz.petal_stagger_ms,
            rotation_step_deg=viz.rotation_step_deg,
            tick_ms=viz.tick_ms,
        )


# =============================================================================
# Scene types
# =============================================================================

@dataclass(frozen=True)
class CenterGlyph:
    """The flower core."""

    radius: float
    base_radius: float
    pulse_radius: Optional[float] = None
    pulse_period: Optional[float] = None

    @property
    def pulses(self) -> bool:
        return self.pulse_radius is not None


@dataclass(frozen=True)
class Petal:
    """
    One placed petal.

    The static transform is rotate(rotation) translate(0, offset) scale(scale);
    jitter_deg is layered on top for trembling petals.
    """

    index: int
    path: str
    rotation: float
    offset: float
    scale: float
    delay: float
    progress: float
    tremble_phase: Optional[float] = None
    jitter_deg: float = 0.0

    @property
    def transform(self) -> str:
        """SVG transform attribute."""
        parts = [f"rotate({format_number(self.rotation + self.jitter_deg)})"]
        parts.append(f"translate(0, {format_number(self.offset)})")
        parts.append(f"scale({format_number(self.scale * self.progress)})")
        return " ".join(parts)


@dataclass(frozen=True)
class Particle:
    """Decorative circle; never affects layout."""

    cx: float
    cy: float
    r: float
    delay: float


@dataclass(frozen=True)
class BloomSchedule:
    """When the scene and each petal finish blooming."""

    duration: float
    petal_delays: Tuple[float, ...]
    easing: Tuple[float, float, float, float] = BLOOM_EASING

    @property
    def total_duration(self) -> float:
        last = self.petal_delays[-1] if self.petal_delays else 0.0
        return last + self.duration


@dataclass(frozen=True)
class Scene:
    """
    Complete description of the flower at one instant.

    Attributes:
        config: The descriptor the scene was built from
        elapsed: Seconds since the flower became visible (< 0: not yet)
        scale: Overall bloom scale (may briefly exceed 1 during overshoot)
        rotation: Ambient rotation in degrees, [0, 360)
        center: Exactly one centre glyph
        petals: Placed petals in index order
        particles: Decorative particles (particle style only)
        bloom: Animation schedule
        coping_steps: Steps rendered with the flower, when built from a result
    """

    config: FlowerConfig
    elapsed: float
    scale: float
    rotation: float
    center: CenterGlyph
    petals: Tuple[Petal, ...]
    particles: Tuple[Particle, ...]
    bloom: BloomSchedule
    coping_steps: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def petal_count(self) -> int:
        return len(self.petals)

    @property
    def is_bloomed(self) -> bool:
        return self.elapsed >= self.bloom.total_duration


# =============================================================================
# Geometry
# =============================================================================

def petal_count(intensity: int) -> int:
    """clamp(round(intensity * 2.5), 6, 24)."""
    return int(clamp(round_half_up(intensity * 2.5), MIN_PETALS, MAX_PETALS))


def center_radius(intensity: int) -> float:
    return 15.0 + intensity


def pulse_radius(config: FlowerConfig, elapsed: float) -> float:
    """
    Centre radius at a point in time.

    Calm cores move linearly base -> base + 5 -> base over each 4 s period.
    """
    base = center_radius(config.intensity)
    if not policy_for(config.style).pulses or elapsed <= 0:
        return base
    phase = (elapsed % PULSE_PERIOD_SECONDS) / PULSE_PERIOD_SECONDS
    return base + PULSE_EXTRA_RADIUS * (1.0 - abs(2.0 * phase - 1.0))


def cubic_bezier(x1: float, y1: float, x2: float, y2: float) -> Callable[[float], float]:
    """
    CSS-style cubic-bezier timing function.

    Solves x(s) = t for s with Newton's method, falling back to bisection,
    then returns y(s).
    """
    def sample(a1: float, a2: float, s: float) -> float:
        return 3 * (1 - s) ** 2 * s * a1 + 3 * (1 - s) * s ** 2 * a2 + s ** 3

    def slope(a1: float, a2: float, s: float) -> float:
        return 3 * (1 - s) ** 2 * a1 + 6 * (1 - s) * s * (a2 - a1) + 3 * s ** 2 * (1 - a2)

    def solve(t: float) -> float:
        s = t
        for _ in range(8):
            err = sample(x1, x2, s) - t
            if abs(err) < 1e-7 and 0.0 <= s <= 1.0:
                return s
            d = slope(x1, x2, s)
            if abs(d) < 1e-6:
                break
            s -= err / d
        lo, hi = 0.0, 1.0
        s = t
        while hi - lo > 1e-7:
            if sample(x1, x2, s) < t:
                lo = s
            else:
                hi = s
            s = (lo + hi) / 2
        return s

    def ease(t: float) -> float:
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return 1.0
        return sample(y1, y2, solve(t))

    return ease


bloom_ease = cubic_bezier(*BLOOM_EASING)


def bloom_duration(bloom_speed: int, timing: AnimationTiming) -> float:
    return timing.base_bloom_seconds / bloom_speed


def petal_delays(n: int, bloom_speed: int, timing: AnimationTiming) -> Tuple[float, ...]:
    """Petal i starts i * (stagger / bloom_speed / n) seconds after the scene."""
    step = timing.petal_stagger_ms / 1000.0 / bloom_speed / n
    return tuple(i * step for i in range(n))


def ambient_rotation(style: FlowerStyle, elapsed: float, timing: AnimationTiming) -> float:
    """Rotation in degrees; always 0 for styles that do not rotate."""
    if not policy_for(style).rotates or elapsed <= 0:
        return 0.0
    ticks = math.floor(elapsed * 1000.0 / timing.tick_ms)
    return (ticks * timing.rotation_step_deg) % 360.0


def tremble_jitter(phase: float, elapsed: float) -> float:
    return TREMBLE_AMPLITUDE_DEG * math.sin(
        2 * math.pi * (max(elapsed, 0.0) + phase) / TREMBLE_PERIOD_SECONDS
    )


def _progress(elapsed: float, delay: float, duration: float) -> float:
    if elapsed < 0:
        return 0.0
    return bloom_ease((elapsed - delay) / duration)


def _particles(rng: random.Random) -> Tuple[Particle, ...]:
    low, high = PARTICLE_RADIUS_RANGE
    particles = []
    for _ in range(PARTICLE_COUNT):
        r = low + rng.random() * (high - low)
        delay = rng.random() * PARTICLE_MAX_DELAY
        cx = (rng.random() - 0.5) * PARTICLE_SPREAD
        cy = (rng.random() - 0.5) * PARTICLE_SPREAD
        particles.append(Particle(cx=cx, cy=cy, r=r, delay=delay))
    return tuple(particles)


# =============================================================================
# Entry points
# =============================================================================

def build_scene(
    config: FlowerConfig,
    elapsed: float = 0.0,
    seed: Optional[int] = None,
    timing: Optional[AnimationTiming] = None,
    coping_steps: Sequence[str] = (),
) -> Scene:
    """
    Build the scene for a config at a point in time.

    Args:
        config: Validated flower descriptor
        elapsed: Seconds since the flower became visible; negative means
            not yet visible (scale 0, no rotation)
        seed: Seed for particle layout and tremble phases
        timing: Animation constants (defaults: 3 s bloom, 300 ms stagger, 0.2° per 50 ms)
        coping_steps: Steps rendered alongside the flower

    Returns:
        Scene
    """
    timing = timing or AnimationTiming()
    policy = policy_for(config.style)
    rng = random.Random(seed)

    n = petal_count(config.intensity)
    step = 360.0 / n
    offset, scale = policy.offset_and_scale(config.intensity)
    duration = bloom_duration(config.bloom_speed, timing)
    delays = petal_delays(n, config.bloom_speed, timing)

    phases = [rng.random() for _ in range(n)] if policy.trembles else [None] * n

    petals = []
    for i in range(n):
        phase = phases[i]
        petals.append(Petal(
            index=i,
            path=policy.path,
            rotation=i * step,
            offset=offset,
            scale=scale,
            delay=delays[i],
            progress=_progress(elapsed, delays[i], duration),
            tremble_phase=phase,
            jitter_deg=tremble_jitter(phase, elapsed) if phase is not None else 0.0,
        ))

    base = center_radius(config.intensity)
    center = CenterGlyph(
        radius=pulse_radius(config, elapsed),
        base_radius=base,
        pulse_radius=base + PULSE_EXTRA_RADIUS if policy.pulses else None,
        pulse_period=PULSE_PERIOD_SECONDS if policy.pulses else None,
    )

    particles = _particles(rng) if policy.emits_particles else ()

    return Scene(
        config=config,
        elapsed=elapsed,
        scale=_progress(elapsed, 0.0, duration),
        rotation=ambient_rotation(config.style, elapsed, timing),
        center=center,
        petals=tuple(petals),
        particles=particles,
        bloom=BloomSchedule(duration=duration, petal_delays=delays),
        coping_steps=tuple(coping_steps),
    )


def build_reflection_scene(
    result: AnalysisResult,
    elapsed: float = 0.0,
    seed: Optional[int] = None,
    timing: Optional[AnimationTiming] = None,
) -> Scene:
    """Scene for a completed analysis, carrying its coping plan."""
    return build_scene(
        result.flower_config,
        elapsed=elapsed,
        seed=seed,
        timing=timing,
        coping_steps=result.coping_plan,
    )


async def animate(
    config: FlowerConfig,
    seed: Optional[int] = None,
    timing: Optional[AnimationTiming] = None,
    max_frames: Optional[int] = None,
    clock: Optional[Callable[[], float]] = None,
) -> AsyncIterator[Scene]:
    """
    Time-driven animation loop.

    Yields one Scene per tick, starting from a fresh not-yet-bloomed state.
    Runs on its own; it shares nothing with the session pipeline.

    Args:
        config: Flower descriptor
        seed: Seed, fixed for the whole run so particles don't jump
        timing: Animation constants
        max_frames: Stop after this many frames (None: forever)
        clock: Monotonic clock (defaults to the event loop clock)
    """
    timing = timing or AnimationTiming()
    loop = asyncio.get_running_loop()
    clock = clock or loop.time
    if seed is None:
        seed = random.randrange(2 ** 32)

    started = clock()
    frame = 0
    while max_frames is None or frame < max_frames:
        yield build_scene(config, elapsed=clock() - started, seed=seed, timing=timing)
        frame += 1
        await asyncio.sleep(timing.tick_ms / 1000.0)


def format_number(value: float) -> str:
    """Compact number formatting for SVG attributes."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
