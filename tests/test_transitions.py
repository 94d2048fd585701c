"""
Transition Tests
================

The pure session transition table.
"""

import pytest

from echo_therapy.models.state import ProcessingState, SessionStatus
from echo_therapy.session.transitions import (
    GENERIC_ERROR_MESSAGE,
    TRANSITIONS,
    SessionEffect,
    SessionEvent,
    transition,
)


S = SessionStatus
E = SessionEvent
F = SessionEffect

UNLISTED = [
    (status, event)
    for status in SessionStatus
    for event in SessionEvent
    if (status, event) not in TRANSITIONS
]


def _state(status: SessionStatus) -> ProcessingState:
    if status == S.ERROR:
        return ProcessingState.error(GENERIC_ERROR_MESSAGE)
    return ProcessingState(status=status)


class TestAcceptedTransitions:
    """Every row of the table."""

    @pytest.mark.parametrize("start", [S.IDLE, S.COMPLETED, S.ERROR])
    def test_start_session(self, start):
        result = transition(_state(start), E.START_SESSION)
        assert result.accepted
        assert result.state.status == S.RECORDING
        assert result.effects == (F.STOP_PLAYBACK, F.DISCARD_RESULT, F.BEGIN_CAPTURE)

    def test_capture_complete(self):
        result = transition(_state(S.RECORDING), E.CAPTURE_COMPLETE)
        assert result.state.status == S.ANALYZING
        assert result.effects == (F.RUN_PIPELINE,)

    def test_analysis_succeeded(self):
        result = transition(_state(S.ANALYZING), E.ANALYSIS_SUCCEEDED)
        assert result.state.status == S.COMPLETED
        assert result.effects == (F.STORE_RESULT, F.START_PLAYBACK)

    @pytest.mark.parametrize("start", [S.RECORDING, S.ANALYZING])
    def test_pipeline_failed(self, start):
        result = transition(_state(start), E.PIPELINE_FAILED)
        assert result.state.status == S.ERROR
        assert result.state.error_message == GENERIC_ERROR_MESSAGE
        assert F.DISCARD_RESULT in result.effects

    @pytest.mark.parametrize("start", [S.COMPLETED, S.ERROR])
    def test_reset(self, start):
        result = transition(_state(start), E.RESET)
        assert result.state == ProcessingState.idle()
        assert result.effects == (F.STOP_PLAYBACK, F.DISCARD_RESULT)

    def test_reset_from_idle_is_noop(self):
        result = transition(ProcessingState.idle(), E.RESET)
        assert result.accepted
        assert result.state == ProcessingState.idle()
        assert result.effects == ()


class TestRejectedTransitions:
    """Everything not in the table leaves the state unchanged."""

    @pytest.mark.parametrize("status,event", UNLISTED)
    def test_unlisted_pairs_are_rejected(self, status, event):
        state = _state(status)
        result = transition(state, event)
        assert not result.accepted
        assert result.state is state
        assert result.effects == ()

    def test_second_capture_while_analyzing(self):
        result = transition(ProcessingState.analyzing(), E.CAPTURE_COMPLETE)
        assert not result.accepted

    @pytest.mark.parametrize("event", [E.START_SESSION, E.RESET])
    def test_analyzing_only_exits_to_terminal_states(self, event):
        assert not transition(ProcessingState.analyzing(), event).accepted

    def test_error_only_in_error_state(self):
        for (status, event), (target, _) in TRANSITIONS.items():
            result = transition(_state(status), event)
            has_message = result.state.error_message is not None
            assert has_message == (target == S.ERROR)


class TestTransitionResult:
    """Tests for the result record."""

    def test_repr(self):
        text = repr(transition(ProcessingState.idle(), E.START_SESSION))
        assert "recording" in text
        assert "BEGIN_CAPTURE" in text
