"""
Analysis Pipeline
=================

LangGraph workflow run while the controller is analyzing.

LangGraph is used for CONTROL FLOW only: the graph fixes the order of the
three steps, and each node owns exactly one collaborator call.

Graph Structure:
    START → analyze → synthesize → decode → END

Ordering guarantees:
    - synthesize only runs after analyze succeeded (it needs the
      affirmation text)
    - decode only runs after synthesize succeeded
    - any failure stops the graph; no partial output is returned

Each remote call is bounded by a timeout. Expiry is reported as the
step's own error (AnalysisError / SynthesisError).
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import END, StateGraph

from echo_therapy.audio.decoder import PCM_SAMPLE_RATE, DecodedAudio, DecodeError, decode_pcm16
from echo_therapy.errors import EchoTherapyError
from echo_therapy.models.analysis import AnalysisResult
from echo_therapy.services.analysis import AnalysisClient, AnalysisError
from echo_therapy.services.speech import SpeechClient, SynthesisError


logger = logging.getLogger(__name__)


class PipelineState(TypedDict, total=False):
    """
    State passed through the pipeline graph.

    Attributes:
        media: Recorded media bytes
        mime_type: Resolved container mime type
        result: Validated analysis (after analyze)
        pcm: Raw affirmation audio (after synthesize)
        audio: Decoded affirmation (after decode)
    """
    media: bytes
    mime_type: str
    result: Optional[AnalysisResult]
    pcm: Optional[bytes]
    audio: Optional[DecodedAudio]


@dataclass(frozen=True)
class PipelineOutput:
    """Everything a completed session needs."""

    result: AnalysisResult
    audio: DecodedAudio


class AnalysisPipeline:
    """
    analyze → synthesize → decode, as a compiled LangGraph.

    Collaborator failures of any kind are raised as the step's error type,
    so the controller only ever sees the four pipeline errors.
    """

    def __init__(
        self,
        analysis_client: AnalysisClient,
        speech_client: SpeechClient,
        analysis_timeout: float = 60.0,
        speech_timeout: float = 30.0,
        sample_rate: int = PCM_SAMPLE_RATE,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            analysis_client: Emotion analysis backend
            speech_client: Text-to-speech backend
            analysis_timeout: Seconds before an analysis call is abandoned
            speech_timeout: Seconds before a synthesis call is abandoned
            sample_rate: Sample rate of the speech backend's PCM
        """
        self.analysis_client = analysis_client
        self.speech_client = speech_client
        self.analysis_timeout = analysis_timeout
        self.speech_timeout = speech_timeout
        self.sample_rate = sample_rate

        self._graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(PipelineState)

        workflow.add_node("analyze", self._analyze_node)
        workflow.add_node("synthesize", self._synthesize_node)
        workflow.add_node("decode", self._decode_node)

        workflow.set_entry_point("analyze")
        workflow.add_edge("analyze", "synthesize")
        workflow.add_edge("synthesize", "decode")
        workflow.add_edge("decode", END)

        return workflow.compile()

    async def _analyze_node(self, state: PipelineState) -> Dict[str, Any]:
        media = state["media"]
        mime_type = state["mime_type"]
        started = time.monotonic()

        try:
            result = await asyncio.wait_for(
                self.analysis_client.analyze(media, mime_type),
                timeout=self.analysis_timeout,
            )
        except asyncio.TimeoutError as e:
            raise AnalysisError(
                f"Analysis timed out after {self.analysis_timeout:.0f}s"
            ) from e
        except AnalysisError:
            raise
        except Exception as e:
            raise AnalysisError(f"Analysis failed: {e}") from e

        if not isinstance(result, AnalysisResult):
            raise AnalysisError(
                f"Analysis client returned {type(result).__name__}, not AnalysisResult"
            )

        logger.info(
            f"Analysis complete in {time.monotonic() - started:.1f}s: "
            f"emotion={result.emotion}, style={result.flower_config.style.value}, "
            f"distress={result.distress_score:.2f}"
        )
        return {"result": result}

    async def _synthesize_node(self, state: PipelineState) -> Dict[str, Any]:
        text = state["result"].affirmation_text
        started = time.monotonic()

        try:
            pcm = await asyncio.wait_for(
                self.speech_client.synthesize(text),
                timeout=self.speech_timeout,
            )
        except asyncio.TimeoutError as e:
            raise SynthesisError(
                f"Speech synthesis timed out after {self.speech_timeout:.0f}s"
            ) from e
        except SynthesisError:
            raise
        except Exception as e:
            raise SynthesisError(f"Speech synthesis failed: {e}") from e

        if not pcm:
            raise SynthesisError("Speech service returned no audio")

        logger.info(
            f"Synthesis complete in {time.monotonic() - started:.1f}s: {len(pcm)} bytes"
        )
        return {"pcm": pcm}

    async def _decode_node(self, state: PipelineState) -> Dict[str, Any]:
        try:
            audio = decode_pcm16(state["pcm"], sample_rate=self.sample_rate)
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"PCM decode failed: {e}") from e
        return {"audio": audio}

    async def run(self, media: bytes, mime_type: str) -> PipelineOutput:
        """
        Run the three steps for one recording.

        Raises:
            AnalysisError, SynthesisError, DecodeError
        """
        final = await self._graph.ainvoke({"media": media, "mime_type": mime_type})

        result = final.get("result")
        audio = final.get("audio")
        if result is None or audio is None:
            raise EchoTherapyError("Pipeline finished without a complete output")

        return PipelineOutput(result=result, audio=audio)
