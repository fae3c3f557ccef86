"""Audio decoding, resampling and output."""

from .decoder import (
    NATIVE_EXTENSIONS,
    SUPPORTED_EXTENSIONS,
    TRANSCODED_EXTENSIONS,
    AudioDecoder,
    AudioFormat,
    AudioInfo,
    DecodedStream,
)
from .device import OutputDevice, get_output_device, init_output_device, shutdown_output_device
from .mixer import AudioMixer, FrameSource, Voice
from .resampler import Resampler
from .session import PlaybackControl, PlaybackSession, duration_seconds, start_session
from .transcode import find_transcoder, transcode_to_wav

__all__ = [
    "AudioDecoder",
    "AudioFormat",
    "AudioInfo",
    "AudioMixer",
    "DecodedStream",
    "FrameSource",
    "NATIVE_EXTENSIONS",
    "OutputDevice",
    "PlaybackControl",
    "PlaybackSession",
    "Resampler",
    "SUPPORTED_EXTENSIONS",
    "TRANSCODED_EXTENSIONS",
    "Voice",
    "duration_seconds",
    "find_transcoder",
    "get_output_device",
    "init_output_device",
    "shutdown_output_device",
    "start_session",
    "transcode_to_wav",
]
