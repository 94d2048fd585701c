"""
Audio Module
============

Decode and play the spoken affirmation.

Components:
    - decode_pcm16: Raw int16 PCM bytes -> DecodedAudio
    - AudioPlayer: Single-voice playback over a pluggable AudioSink
    - SilentSink / SoundDeviceSink: Output backends
"""

from echo_therapy.audio.decoder import (
    PCM_SAMPLE_RATE,
    DecodeError,
    DecodedAudio,
    decode_pcm16,
)
from echo_therapy.audio.playback import (
    AudioPlayer,
    AudioSink,
    SilentSink,
    SoundDeviceSink,
    Voice,
    create_sink,
)

__all__ = [
    "PCM_SAMPLE_RATE",
    "DecodeError",
    "DecodedAudio",
    "decode_pcm16",
    "AudioPlayer",
    "AudioSink",
    "SilentSink",
    "SoundDeviceSink",
    "Voice",
    "create_sink",
]
