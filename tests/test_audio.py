"""
Audio Tests
===========

PCM decoding and the single-voice player.
"""

import asyncio

import numpy as np
import pytest

from echo_therapy.audio import AudioPlayer, DecodeError, SilentSink, create_sink, decode_pcm16
from echo_therapy.audio.decoder import DecodedAudio


def _audio(seconds: float, rate: int = 1000) -> DecodedAudio:
    return DecodedAudio(samples=np.zeros(int(seconds * rate), dtype=np.float32), sample_rate=rate)


class TestDecodePcm16:
    """Tests for raw PCM decoding."""

    def test_known_samples(self):
        audio = decode_pcm16(bytes([0x00, 0x00, 0x00, 0x40]))
        assert audio.sample_rate == 24000
        assert audio.channels == 1
        assert audio.samples.dtype == np.float32
        assert audio.samples.tolist() == [0.0, 0.5]

    def test_extremes(self):
        audio = decode_pcm16(bytes([0x00, 0x80, 0xFF, 0x7F]))
        assert audio.samples[0] == -1.0
        assert audio.samples[1] == pytest.approx(32767 / 32768)

    def test_duration(self):
        audio = decode_pcm16(b"\x00\x00" * 24000)
        assert audio.frame_count == 24000
        assert audio.duration == pytest.approx(1.0)

    def test_custom_sample_rate(self):
        audio = decode_pcm16(b"\x00\x00" * 100, sample_rate=16000)
        assert audio.sample_rate == 16000

    @pytest.mark.parametrize("data", [b"", b"\x00\x00\x00"])
    def test_rejects_malformed(self, data):
        with pytest.raises(DecodeError):
            decode_pcm16(data)

    def test_rejects_non_bytes(self):
        with pytest.raises(DecodeError):
            decode_pcm16("not bytes")

    def test_rejects_bad_rate(self):
        with pytest.raises(DecodeError):
            decode_pcm16(b"\x00\x00", sample_rate=0)

    def test_error_kind(self):
        with pytest.raises(DecodeError) as exc:
            decode_pcm16(b"\x00")
        assert exc.value.kind == "decode"


class TestAudioPlayer:
    """Tests for playback ownership."""

    @pytest.mark.asyncio
    async def test_play_without_buffer(self, player):
        assert player.play() is False
        assert not player.is_playing

    @pytest.mark.asyncio
    async def test_play_and_finish(self, player, sink):
        player.load(_audio(0.01))
        assert player.play() is True
        assert player.is_playing
        await player.wait()
        assert not player.is_playing
        assert sink.voices[0].finished

    @pytest.mark.asyncio
    async def test_replay_stops_previous_voice(self, player, sink):
        player.load(_audio(10.0))
        player.play()
        player.play()
        assert len(sink.voices) == 2
        assert sink.voices[0].finished
        assert not sink.voices[1].finished
        assert player.is_playing
        player.stop()

    @pytest.mark.asyncio
    async def test_old_voice_does_not_clear_new_one(self, player, sink):
        player.load(_audio(10.0))
        player.play()
        player.play()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert player.is_playing
        player.stop()

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, player, sink):
        player.stop()
        player.load(_audio(10.0))
        player.play()
        player.stop()
        player.stop()
        assert not player.is_playing
        assert sink.voices[0].finished

    @pytest.mark.asyncio
    async def test_load_stops_playback(self, player, sink):
        player.load(_audio(10.0))
        player.play()
        player.load(_audio(1.0))
        assert not player.is_playing
        assert sink.voices[0].finished

    @pytest.mark.asyncio
    async def test_unload_drops_buffer(self, player):
        player.load(_audio(10.0))
        player.play()
        player.unload()
        assert player.buffer is None
        assert not player.is_playing
        assert player.play() is False


class TestCreateSink:
    """Tests for the sink factory."""

    def test_silent(self):
        assert isinstance(create_sink("silent"), SilentSink)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_sink("speakers")

    def test_default_player_is_silent(self):
        assert AudioPlayer().buffer is None
