"""
Audio Playback
==============

Single-voice playback of the decoded affirmation.

The AudioPlayer owns at most one decoded buffer and at most one active
voice. Output devices are pluggable through the AudioSink protocol:

    - SilentSink: Simulates playback timing without a device (default)
    - SoundDeviceSink: Real output through the sounddevice library

Rules:
    - play() stops any active voice, then starts from sample 0
    - Natural completion clears is_playing
    - stop() halts immediately; no-op when nothing is playing
    - load() of a new buffer stops the active voice first
"""

import asyncio
import logging
from typing import Optional, Protocol

from echo_therapy.audio.decoder import DecodedAudio


logger = logging.getLogger(__name__)


class Voice(Protocol):
    """One playing instance of a decoded buffer."""

    def stop(self) -> None:
        """Halt playback immediately."""
        ...

    async def wait(self) -> None:
        """Return once playback has finished or been stopped."""
        ...


class AudioSink(Protocol):
    """Protocol for output backends."""

    def start(self, audio: DecodedAudio) -> Voice:
        """Begin playing audio from sample 0."""
        ...


# =============================================================================
# Sinks
# =============================================================================

class SilentVoice:
    """Voice that finishes after the buffer's duration without producing sound."""

    def __init__(self, duration: float) -> None:
        self._done = asyncio.Event()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(max(0.0, duration), self._done.set)

    @property
    def finished(self) -> bool:
        return self._done.is_set()

    def stop(self) -> None:
        self._handle.cancel()
        self._done.set()

    async def wait(self) -> None:
        await self._done.wait()


class SilentSink:
    """Output backend for headless runs and tests."""

    def __init__(self) -> None:
        self.started_count = 0

    def start(self, audio: DecodedAudio) -> SilentVoice:
        self.started_count += 1
        return SilentVoice(audio.duration)


class SoundDeviceVoice:
    """
    Voice backed by a sounddevice OutputStream.

    Samples are fed from the stream callback; the finished callback runs on
    the audio thread and is handed back to the event loop.
    """

    def __init__(self, sd, audio: DecodedAudio) -> None:
        self._sd = sd
        self._samples = audio.samples.reshape(-1, 1)
        self._position = 0
        self._done = asyncio.Event()
        self._loop = asyncio.get_running_loop()

        self._stream = sd.OutputStream(
            samplerate=audio.sample_rate,
            channels=audio.channels,
            dtype="float32",
            callback=self._callback,
            finished_callback=self._finished_callback,
        )
        self._stream.start()

    def _callback(self, outdata, frames, time_info, status) -> None:
        if status:
            logger.debug(f"Output stream status: {status}")
        chunk = self._samples[self._position:self._position + frames]
        outdata[:len(chunk)] = chunk
        outdata[len(chunk):] = 0
        self._position += frames
        if len(chunk) < frames:
            raise self._sd.CallbackStop

    def _finished_callback(self) -> None:
        self._loop.call_soon_threadsafe(self._on_finished)

    def _on_finished(self) -> None:
        self._stream.close()
        self._done.set()

    def stop(self) -> None:
        if not self._done.is_set():
            self._stream.abort()

    async def wait(self) -> None:
        await self._done.wait()


class SoundDeviceSink:
    """
    Output backend playing through the default audio device.

    Raises:
        ImportError: If sounddevice is not installed
    """

    def __init__(self) -> None:
        try:
            import sounddevice
        except ImportError:
            raise ImportError(
                "sounddevice is required for SoundDeviceSink. "
                "Install with: pip install 'echo-therapy[audio]'"
            )
        self._sd = sounddevice
        logger.info("SoundDeviceSink initialized")

    def start(self, audio: DecodedAudio) -> SoundDeviceVoice:
        return SoundDeviceVoice(self._sd, audio)


def create_sink(backend: str) -> AudioSink:
    """Create an output backend by configured name."""
    if backend == "sounddevice":
        return SoundDeviceSink()
    if backend == "silent":
        return SilentSink()
    raise ValueError(f"Unknown playback backend: {backend!r}")


# =============================================================================
# Player
# =============================================================================

class AudioPlayer:
    """
    Holds the decoded affirmation and its single active voice.

    Example:
        player = AudioPlayer(SilentSink())
        player.load(decode_pcm16(pcm_bytes))
        player.play()
        ...
        player.stop()
    """

    def __init__(self, sink: Optional[AudioSink] = None) -> None:
        self._sink = sink or SilentSink()
        self._buffer: Optional[DecodedAudio] = None
        self._voice: Optional[Voice] = None
        self._watch_task: Optional[asyncio.Task] = None

    @property
    def buffer(self) -> Optional[DecodedAudio]:
        return self._buffer

    @property
    def is_playing(self) -> bool:
        return self._voice is not None

    def load(self, audio: DecodedAudio) -> None:
        """Replace the decoded buffer, stopping any active voice first."""
        self.stop()
        self._buffer = audio
        logger.debug(f"Loaded {audio!r}")

    def unload(self) -> None:
        """Stop playback and drop the buffer."""
        self.stop()
        self._buffer = None

    def play(self) -> bool:
        """
        Play the buffer from the start.

        Must be called from a running event loop.

        Returns:
            False if no buffer is loaded, True otherwise
        """
        if self._buffer is None:
            return False

        self.stop()
        voice = self._sink.start(self._buffer)
        self._voice = voice
        self._watch_task = asyncio.get_running_loop().create_task(self._watch(voice))
        logger.info(f"Playback started ({self._buffer.duration:.1f}s)")
        return True

    def stop(self) -> None:
        """Halt the active voice. No-op when nothing is playing."""
        if self._voice is None:
            return
        voice, self._voice = self._voice, None
        voice.stop()
        logger.info("Playback stopped")

    async def wait(self) -> None:
        """Wait for the current voice to finish or be stopped."""
        if self._watch_task is not None:
            await self._watch_task

    async def _watch(self, voice: Voice) -> None:
        await voice.wait()
        # A replaced or stopped voice must not clear the flag of its successor
        if self._voice is voice:
            self._voice = None
            logger.debug("Playback finished")
