"""
Session Transition Logic
========================

Deterministic transition table for the session controller.

transition(state, event) is a pure function returning the next state and
the side effects the controller must perform. It does no I/O, so the whole
lifecycle can be tested without devices, services or a clock.

Transition Rules:
    idle | completed | error  --START_SESSION-->      recording
    recording                 --CAPTURE_COMPLETE-->   analyzing
    recording                 --PIPELINE_FAILED-->    error      (capture denied)
    analyzing                 --ANALYSIS_SUCCEEDED--> completed
    analyzing                 --PIPELINE_FAILED-->    error
    completed | error | idle  --RESET-->              idle

Anything else is rejected and leaves the state unchanged. In particular
analyzing only ever exits to completed or error, and a second
CAPTURE_COMPLETE while analyzing is rejected (single-flight).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from echo_therapy.models.state import ProcessingState, SessionStatus


GENERIC_ERROR_MESSAGE = "We couldn't quite catch that. Please try again."


class SessionEvent(str, Enum):
    """Inputs to the state machine."""

    START_SESSION = "START_SESSION"
    CAPTURE_COMPLETE = "CAPTURE_COMPLETE"
    ANALYSIS_SUCCEEDED = "ANALYSIS_SUCCEEDED"
    PIPELINE_FAILED = "PIPELINE_FAILED"
    RESET = "RESET"


class SessionEffect(str, Enum):
    """
    Side effects requested by a transition, in execution order.

    Attributes:
        STOP_PLAYBACK: Halt the active voice
        DISCARD_RESULT: Drop the held result and decoded buffer
        BEGIN_CAPTURE: Hand over to the capture adapter
        RUN_PIPELINE: Start analysis -> synthesis -> decode
        STORE_RESULT: Hold the new result and decoded buffer
        START_PLAYBACK: Play the affirmation (if autoplay is on)
    """

    STOP_PLAYBACK = "STOP_PLAYBACK"
    DISCARD_RESULT = "DISCARD_RESULT"
    BEGIN_CAPTURE = "BEGIN_CAPTURE"
    RUN_PIPELINE = "RUN_PIPELINE"
    STORE_RESULT = "STORE_RESULT"
    START_PLAYBACK = "START_PLAYBACK"


@dataclass(frozen=True)
class TransitionResult:
    """Result of applying one event."""

    state: ProcessingState
    effects: Tuple[SessionEffect, ...]
    accepted: bool

    def __repr__(self) -> str:
        effects = ",".join(e.value for e in self.effects) or "-"
        return (
            f"TransitionResult({self.state.status.value}, "
            f"effects={effects}, accepted={self.accepted})"
        )


_S = SessionStatus
_E = SessionEvent
_F = SessionEffect

_NEW_SESSION = (_F.STOP_PLAYBACK, _F.DISCARD_RESULT, _F.BEGIN_CAPTURE)
_CLEAR = (_F.STOP_PLAYBACK, _F.DISCARD_RESULT)

TRANSITIONS: Dict[Tuple[SessionStatus, SessionEvent], Tuple[SessionStatus, Tuple[SessionEffect, ...]]] = {
    (_S.IDLE, _E.START_SESSION): (_S.RECORDING, _NEW_SESSION),
    (_S.COMPLETED, _E.START_SESSION): (_S.RECORDING, _NEW_SESSION),
    (_S.ERROR, _E.START_SESSION): (_S.RECORDING, _NEW_SESSION),

    (_S.RECORDING, _E.CAPTURE_COMPLETE): (_S.ANALYZING, (_F.RUN_PIPELINE,)),
    (_S.RECORDING, _E.PIPELINE_FAILED): (_S.ERROR, _CLEAR),

    (_S.ANALYZING, _E.ANALYSIS_SUCCEEDED): (_S.COMPLETED, (_F.STORE_RESULT, _F.START_PLAYBACK)),
    (_S.ANALYZING, _E.PIPELINE_FAILED): (_S.ERROR, _CLEAR),

    (_S.COMPLETED, _E.RESET): (_S.IDLE, _CLEAR),
    (_S.ERROR, _E.RESET): (_S.IDLE, _CLEAR),
    (_S.IDLE, _E.RESET): (_S.IDLE, ()),
}


def transition(state: ProcessingState, event: SessionEvent) -> TransitionResult:
    """
    Apply an event to a state.

    Args:
        state: Current processing state
        event: Event to apply

    Returns:
        TransitionResult; when accepted is False the state is unchanged
        and there are no effects
    """
    entry = TRANSITIONS.get((state.status, SessionEvent(event)))
    if entry is None:
        return TransitionResult(state=state, effects=(), accepted=False)

    target, effects = entry
    if target == SessionStatus.ERROR:
        new_state = ProcessingState.error(GENERIC_ERROR_MESSAGE)
    else:
        new_state = ProcessingState(status=target)

    return TransitionResult(state=new_state, effects=effects, accepted=True)
