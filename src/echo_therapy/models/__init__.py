"""
Data Models
===========

Pydantic models for EchoTherapy.

This module re-exports all data models for convenient access.

Models:
    Flower:
        - FlowerStyle: Closed enum of visual styles
        - FlowerConfig: Visualization descriptor (color, intensity, bloom, style)

    Analysis:
        - AnalysisResult: Authoritative payload of a completed session
        - CrisisResource: Immediate-support contact

    State:
        - SessionStatus: Enum of controller states
        - ProcessingState: Current controller state + optional error message
"""

from echo_therapy.models.flower import FlowerConfig, FlowerStyle
from echo_therapy.models.analysis import (
    CRISIS_RESOURCES,
    CRISIS_THRESHOLD,
    AnalysisResult,
    CrisisResource,
    needs_crisis_support,
)
from echo_therapy.models.state import ProcessingState, SessionStatus

__all__ = [
    # Flower
    "FlowerStyle",
    "FlowerConfig",
    # Analysis
    "AnalysisResult",
    "CrisisResource",
    "CRISIS_RESOURCES",
    "CRISIS_THRESHOLD",
    "needs_crisis_support",
    # State
    "SessionStatus",
    "ProcessingState",
]
