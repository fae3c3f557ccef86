"""Open audio files as seekable frame streams.

Format dispatch (by lower-cased extension):

- ``.wav`` / ``.mp3``: decoded natively by libsndfile (via soundfile)
- ``.m4a``: converted with ffmpeg to a temporary WAV, then decoded
- anything else: handed to libsndfile as-is (best effort)

Lengths and positions are always counted in frames: one value per
channel per instant, which is libsndfile's unit. A stereo file of
44100 frames at 44100 Hz lasts one second.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import numpy.typing as npt
import soundfile as sf

from padboard.exceptions import AudioFileNotFoundError, DecodeFailureError

from .transcode import transcode_to_wav

logger = logging.getLogger(__name__)

NATIVE_EXTENSIONS = frozenset({".wav", ".mp3"})
TRANSCODED_EXTENSIONS = frozenset({".m4a"})
# Extensions accepted when adding or reloading pads
SUPPORTED_EXTENSIONS = NATIVE_EXTENSIONS | TRANSCODED_EXTENSIONS | {".ogg"}

# Assumed when a file reports a sample rate of 0
FALLBACK_SAMPLE_RATE = 44100


@dataclass(frozen=True, slots=True)
class AudioFormat:
    """Format descriptor of a decoded stream."""

    sample_rate: int   # Sample rate in Hz (0 if the file reports none)
    num_channels: int  # Number of channels (1=mono, 2=stereo)


@dataclass(frozen=True, slots=True)
class AudioInfo:
    """Result of probing a file without keeping it open."""

    format: AudioFormat
    num_frames: int

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.num_frames / (self.format.sample_rate or FALLBACK_SAMPLE_RATE)


class DecodedStream:
    """
    Seekable float32 frame stream over an open audio file.

    Not thread-safe on its own; PlaybackControl serializes access between
    the audio thread and user actions.
    """

    def __init__(self, sound_file: sf.SoundFile, path: Path, cleanup_path: Optional[Path] = None):
        """
        Args:
            sound_file: Open soundfile handle (read mode)
            path: Original clip path (for logging)
            cleanup_path: Temporary file to delete on close, if any
        """
        self._file = sound_file
        self.path = path
        self._cleanup_path = cleanup_path
        self._format = AudioFormat(
            sample_rate=int(sound_file.samplerate),
            num_channels=int(sound_file.channels),
        )
        self._num_frames = int(sound_file.frames)
        self._position = 0
        self._closed = False

    @property
    def format(self) -> AudioFormat:
        return self._format

    @property
    def num_frames(self) -> int:
        """Total length in frames."""
        return self._num_frames

    @property
    def position(self) -> int:
        """Index of the next frame read() will return."""
        return self._position

    @property
    def closed(self) -> bool:
        return self._closed

    def seek(self, frame: int) -> int:
        """
        Move to an absolute frame position, clamped to [0, num_frames].

        Returns:
            The new position
        """
        if self._closed:
            raise ValueError(f"Stream for {self.path} is closed")
        frame = max(0, min(int(frame), self._num_frames))
        self._file.seek(frame)
        self._position = frame
        return frame

    def read(self, num_frames: int) -> npt.NDArray[np.float32]:
        """
        Read up to num_frames frames.

        Returns:
            Array of shape (frames_read, num_channels). Fewer than requested
            frames (possibly zero) means the end of the stream.
        """
        if self._closed or num_frames <= 0:
            return np.zeros((0, self._format.num_channels), dtype=np.float32)

        data = self._file.read(num_frames, dtype="float32", always_2d=True)
        self._position += len(data)
        return data

    def close(self) -> None:
        """Release the file handle and any temp file. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            self._file.close()
        finally:
            if self._cleanup_path is not None:
                self._cleanup_path.unlink(missing_ok=True)
                logger.debug(f"Removed temp file {self._cleanup_path}")
                self._cleanup_path = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"{self._position}/{self._num_frames}"
        return f"DecodedStream({self.path.name!r}, {state})"


class AudioDecoder:
    """
    Open audio files as DecodedStreams.

    Every call returns a fresh, independent stream; nothing is cached.
    """

    def __init__(self, transcoder: str = "ffmpeg", transcode_sample_rate: int = 44100):
        """
        Args:
            transcoder: Executable used for formats libsndfile cannot read
            transcode_sample_rate: Rate of the intermediate WAV
        """
        self.transcoder = transcoder
        self.transcode_sample_rate = transcode_sample_rate

    def decode(self, path: Path) -> tuple[DecodedStream, AudioFormat]:
        """
        Open an audio file for streaming.

        Args:
            path: Audio file

        Returns:
            (stream, format). The caller must close the stream.

        Raises:
            AudioFileNotFoundError: If the file doesn't exist
            MissingExternalToolError: If the format needs a transcoder that isn't installed
            ExternalToolFailureError: If the transcoder fails
            DecodeFailureError: If the data cannot be decoded
        """
        path = Path(path)
        if not path.exists():
            raise AudioFileNotFoundError(path)

        opener = self._opener_for(path.suffix.lower())
        stream = opener(path)

        fmt = stream.format
        logger.debug(
            f"Decoded {path.name}: {stream.num_frames} frames, "
            f"{fmt.sample_rate} Hz, {fmt.num_channels} ch"
        )
        return stream, fmt

    def probe(self, path: Path) -> AudioInfo:
        """
        Decode-verify a file and close it straight away.

        Raises:
            Same as decode()
        """
        stream, fmt = self.decode(path)
        with stream:
            return AudioInfo(format=fmt, num_frames=stream.num_frames)

    def _opener_for(self, extension: str) -> Callable[[Path], DecodedStream]:
        if extension in TRANSCODED_EXTENSIONS:
            return self._open_transcoded
        if extension not in NATIVE_EXTENSIONS:
            logger.debug(f"No dedicated decoder for '{extension}', trying libsndfile")
        return self._open_native

    def _open_native(self, path: Path) -> DecodedStream:
        try:
            sound_file = sf.SoundFile(str(path), mode="r")
        except (sf.SoundFileError, RuntimeError) as e:
            raise DecodeFailureError(path, str(e)) from e
        return DecodedStream(sound_file, path)

    def _open_transcoded(self, path: Path) -> DecodedStream:
        tmp_path = transcode_to_wav(path, self.transcoder, self.transcode_sample_rate)
        try:
            sound_file = sf.SoundFile(str(tmp_path), mode="r")
        except (sf.SoundFileError, RuntimeError) as e:
            tmp_path.unlink(missing_ok=True)
            raise DecodeFailureError(path, str(e)) from e
        return DecodedStream(sound_file, path, cleanup_path=tmp_path)
