"""
Session Controller
==================

Owns the session lifecycle: one recording, one analysis, one affirmation.

The controller applies SessionEvents through the pure transition table and
carries out the effects it returns. All state changes happen on the event
loop thread, and the move into analyzing happens before the first await,
so two overlapping capture completions can never both start a pipeline.

Ownership:
    - the AnalysisResult exists only while the state is completed
    - the decoded affirmation buffer lives in the AudioPlayer
    - at most one voice is ever active
"""

import logging
from typing import Callable, Optional, Tuple

from echo_therapy.audio.playback import AudioPlayer, create_sink
from echo_therapy.capture.adapter import CaptureAdapter, CaptureError
from echo_therapy.capture.media import MAX_CAPTURE_SECONDS, MediaKind, resolve_mime_type
from echo_therapy.errors import EchoTherapyError
from echo_therapy.models.analysis import CRISIS_RESOURCES, AnalysisResult, CrisisResource
from echo_therapy.models.flower import FlowerStyle
from echo_therapy.models.state import ProcessingState, SessionStatus
from echo_therapy.services.analysis import AnalysisClient, create_analysis_client
from echo_therapy.services.speech import SpeechClient, create_speech_client
from echo_therapy.session.pipeline import AnalysisPipeline, PipelineOutput
from echo_therapy.session.transitions import (
    SessionEffect,
    SessionEvent,
    TransitionResult,
    transition,
)
from echo_therapy.visualization.engine import AnimationTiming, Scene, build_reflection_scene


logger = logging.getLogger(__name__)


CELEBRATORY_STYLES = frozenset({FlowerStyle.PARTICLE, FlowerStyle.CALM})


class SessionController:
    """
    Drives capture → analysis → synthesis → playback for one user.

    Example:
        controller = SessionController(MockAnalysisClient(), MockSpeechClient())
        await controller.start_session()
        await controller.capture_complete(data, "audio/webm")
        if controller.state.status == SessionStatus.COMPLETED:
            print(controller.result.empathy_summary)
    """

    def __init__(
        self,
        analysis_client: AnalysisClient,
        speech_client: SpeechClient,
        player: Optional[AudioPlayer] = None,
        capture_adapter: Optional[CaptureAdapter] = None,
        on_celebrate: Optional[Callable[[str], None]] = None,
        autoplay: bool = True,
        analysis_timeout: float = 60.0,
        speech_timeout: float = 30.0,
        sample_rate: int = 24000,
        max_capture_seconds: float = MAX_CAPTURE_SECONDS,
        timing: Optional[AnimationTiming] = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            analysis_client: Emotion analysis backend
            speech_client: Text-to-speech backend
            player: Affirmation player (silent player if omitted)
            capture_adapter: Recorder used by start_session; without one,
                the host delivers media through capture_complete
            on_celebrate: Best-effort hook called with the flower colour
                after an affirmative reflection
            autoplay: Start playback as soon as a session completes
            analysis_timeout: Seconds before analysis is abandoned
            speech_timeout: Seconds before synthesis is abandoned
            sample_rate: Sample rate of the speech backend's PCM
            max_capture_seconds: Recording auto-stop limit
            timing: Animation timing used by scene()
        """
        self.player = player or AudioPlayer()
        self.capture_adapter = capture_adapter
        self.on_celebrate = on_celebrate
        self.autoplay = autoplay
        self.max_capture_seconds = max_capture_seconds
        self.timing = timing or AnimationTiming()

        self._pipeline = AnalysisPipeline(
            analysis_client,
            speech_client,
            analysis_timeout=analysis_timeout,
            speech_timeout=speech_timeout,
            sample_rate=sample_rate,
        )

        self._state = ProcessingState.idle()
        self._result: Optional[AnalysisResult] = None
        self._kind = MediaKind.AUDIO
        self._session_count = 0

    @classmethod
    def from_settings(
        cls,
        settings,
        capture_adapter: Optional[CaptureAdapter] = None,
        on_celebrate: Optional[Callable[[str], None]] = None,
        analysis_client: Optional[AnalysisClient] = None,
    ) -> "SessionController":
        """Build a controller with the backends named in Settings."""
        if analysis_client is None:
            analysis_client = create_analysis_client(
                settings.analysis.backend, settings.analysis.model
            )
        speech_client = create_speech_client(
            settings.speech.backend,
            settings.speech.model,
            settings.speech.voice,
            settings.speech.sample_rate,
        )
        player = AudioPlayer(create_sink(settings.playback.backend))

        return cls(
            analysis_client,
            speech_client,
            player=player,
            capture_adapter=capture_adapter,
            on_celebrate=on_celebrate,
            autoplay=settings.playback.autoplay,
            analysis_timeout=settings.analysis.timeout_seconds,
            speech_timeout=settings.speech.timeout_seconds,
            sample_rate=settings.speech.sample_rate,
            max_capture_seconds=settings.capture.max_seconds,
            timing=AnimationTiming.from_settings(settings.visualization),
        )

    # =========================================================================
    # Observable state
    # =========================================================================

    @property
    def state(self) -> ProcessingState:
        return self._state

    @property
    def result(self) -> Optional[AnalysisResult]:
        """The current reflection; None unless the state is completed."""
        return self._result

    @property
    def is_playing(self) -> bool:
        return self.player.is_playing

    @property
    def needs_crisis_support(self) -> bool:
        return self._result is not None and self._result.needs_crisis_support

    @property
    def crisis_resources(self) -> Tuple[CrisisResource, ...]:
        """Support contacts to surface, empty when not triggered."""
        return CRISIS_RESOURCES if self.needs_crisis_support else ()

    # =========================================================================
    # Events
    # =========================================================================

    async def start_session(self, kind: MediaKind = MediaKind.AUDIO) -> bool:
        """
        Begin a new recording.

        Stops any playing affirmation and discards the previous result. With
        a capture adapter the recording is awaited and analyzed here;
        otherwise the host must call capture_complete.

        Returns:
            False if a session is already recording or analyzing

        Raises:
            ValueError: If kind is not a MediaKind (state is unchanged)
        """
        kind = MediaKind(kind)
        outcome = self._apply(SessionEvent.START_SESSION)
        if not outcome.accepted:
            return False

        self._kind = kind
        self._session_count += 1
        logger.info(f"Session {self._session_count} started ({self._kind.value})")

        if self.capture_adapter is None:
            return True

        try:
            media = await self.capture_adapter.record(self._kind, self.max_capture_seconds)
        except CaptureError as e:
            self._fail(e)
            return True
        except Exception as e:
            self._fail(CaptureError(f"Capture failed: {e}"))
            return True

        await self.capture_complete(media.data, media.mime_type, media.kind)
        return True

    async def capture_complete(
        self,
        data: bytes,
        mime_type: Optional[str] = None,
        kind: Optional[MediaKind] = None,
    ) -> bool:
        """
        Hand a finished recording to the pipeline.

        Returns:
            False if rejected (no recording in progress, or a pipeline is
            already running)
        """
        outcome = self._apply(SessionEvent.CAPTURE_COMPLETE)
        if not outcome.accepted:
            return False

        try:
            media_kind = MediaKind(kind) if kind is not None else self._kind
            resolved = resolve_mime_type(mime_type, media_kind)
        except ValueError as e:
            self._fail(CaptureError(f"Unusable recording: {e}"))
            return True

        logger.info(f"Analyzing {len(data)} bytes of {resolved}")

        try:
            output = await self._pipeline.run(data, resolved)
        except EchoTherapyError as e:
            self._fail(e)
            return True
        except Exception as e:
            logger.exception(f"Unexpected pipeline failure: {e}")
            self._apply(SessionEvent.PIPELINE_FAILED)
            return True

        self._apply(SessionEvent.ANALYSIS_SUCCEEDED, output)
        self._celebrate(output.result)
        return True

    def capture_failed(self, error: Exception) -> bool:
        """Report a capture failure (e.g. permission denied) from the host."""
        if not isinstance(error, CaptureError):
            error = CaptureError(str(error))
        return self._fail(error)

    def reset(self) -> bool:
        """Return to idle, stopping playback and discarding the result."""
        return self._apply(SessionEvent.RESET).accepted

    def retry(self) -> bool:
        """Leave an error state so a new session can be started."""
        return self.reset()

    # =========================================================================
    # Playback
    # =========================================================================

    def play(self) -> bool:
        """Replay the affirmation from the start (completed sessions only)."""
        if self._state.status != SessionStatus.COMPLETED:
            return False
        try:
            return self.player.play()
        except Exception as e:
            logger.error(f"Playback failed to start: {e}")
            return False

    def stop(self) -> None:
        self.player.stop()

    def toggle_playback(self) -> bool:
        """
        Stop if playing, otherwise play.

        Returns:
            True if playback is active afterwards
        """
        if self.player.is_playing:
            self.player.stop()
            return False
        return self.play()

    # =========================================================================
    # Visualization
    # =========================================================================

    def scene(self, elapsed: float = 0.0, seed: Optional[int] = None) -> Optional[Scene]:
        """Flower scene for the current reflection, None unless completed."""
        if self._result is None:
            return None
        return build_reflection_scene(self._result, elapsed=elapsed, seed=seed, timing=self.timing)

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply(
        self,
        event: SessionEvent,
        output: Optional[PipelineOutput] = None,
    ) -> TransitionResult:
        outcome = transition(self._state, event)
        if not outcome.accepted:
            logger.warning(f"Rejected {event.value} while {self._state.status.value}")
            return outcome

        if outcome.state.status != self._state.status:
            logger.info(
                f"State transition: {self._state.status.value} -> "
                f"{outcome.state.status.value} ({event.value})"
            )
        self._state = outcome.state

        for effect in outcome.effects:
            if effect == SessionEffect.STOP_PLAYBACK:
                self.player.stop()
            elif effect == SessionEffect.DISCARD_RESULT:
                self._result = None
                self.player.unload()
            elif effect == SessionEffect.STORE_RESULT:
                self._result = output.result
                self.player.load(output.audio)
            elif effect == SessionEffect.START_PLAYBACK:
                if self.autoplay:
                    self.play()
            # BEGIN_CAPTURE and RUN_PIPELINE are awaited by the calling event method

        return outcome

    def _fail(self, error: EchoTherapyError) -> bool:
        logger.error(f"Session failed [{error.kind}]: {error}")
        return self._apply(SessionEvent.PIPELINE_FAILED).accepted

    def _celebrate(self, result: AnalysisResult) -> None:
        if self.on_celebrate is None:
            return
        if not result.is_affirmative or result.flower_config.style not in CELEBRATORY_STYLES:
            return
        try:
            self.on_celebrate(result.flower_config.base_color)
        except Exception as e:
            logger.warning(f"Celebration hook failed: {e}")
