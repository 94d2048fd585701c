"""
Session Module
==============

Lifecycle of one reflection: recording, analysis, affirmation playback.

This module provides:
    - transition: Pure state transition table
    - AnalysisPipeline: LangGraph analyze → synthesize → decode workflow
    - SessionController: Event-driven owner of state, result and playback
"""

from echo_therapy.session.controller import CELEBRATORY_STYLES, SessionController
from echo_therapy.session.pipeline import AnalysisPipeline, PipelineOutput, PipelineState
from echo_therapy.session.transitions import (
    GENERIC_ERROR_MESSAGE,
    TRANSITIONS,
    SessionEffect,
    SessionEvent,
    TransitionResult,
    transition,
)


__all__ = [
    "CELEBRATORY_STYLES",
    "SessionController",
    "AnalysisPipeline",
    "PipelineOutput",
    "PipelineState",
    "GENERIC_ERROR_MESSAGE",
    "TRANSITIONS",
    "SessionEffect",
    "SessionEvent",
    "TransitionResult",
    "transition",
]
