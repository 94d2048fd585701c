"""
Visualization Module
====================

Procedural mood flower for a FlowerConfig.

This module provides:
    - build_scene / build_reflection_scene: Pure scene generation
    - animate: Independent time-driven animation loop
    - render_svg: Scene -> SVG document
    - PETAL_POLICIES: Closed per-style shape/behaviour table

DESIGN RULES:
    - Does NOT import session logic
    - Never mutates the analysis result it draws
"""

from echo_therapy.visualization.engine import (
    AnimationTiming,
    BloomSchedule,
    CenterGlyph,
    Particle,
    Petal,
    Scene,
    ambient_rotation,
    animate,
    bloom_ease,
    build_reflection_scene,
    build_scene,
    petal_count,
)
from echo_therapy.visualization.petals import PETAL_POLICIES, PetalPolicy, Placement
from echo_therapy.visualization.svg import render_svg


__all__ = [
    "AnimationTiming",
    "BloomSchedule",
    "CenterGlyph",
    "Particle",
    "Petal",
    "Scene",
    "ambient_rotation",
    "animate",
    "bloom_ease",
    "build_reflection_scene",
    "build_scene",
    "petal_count",
    "PETAL_POLICIES",
    "PetalPolicy",
    "Placement",
    "render_svg",
]
