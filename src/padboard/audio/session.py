"""Playback sessions: one decoded stream playing through the shared device.

A session is created for every Play (or cold Resume) and thrown away on
Stop or natural completion; sessions are never reused.

    DecodedStream -> Resampler -> PlaybackControl -> OutputDevice
                                                       |
                                          on_done -> session.done
"""

import logging
import threading
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from .decoder import FALLBACK_SAMPLE_RATE, AudioFormat, DecodedStream
from .resampler import Resampler

if TYPE_CHECKING:
    from .device import OutputDevice

logger = logging.getLogger(__name__)


def effective_sample_rate(sample_rate: int) -> int:
    """Sample rate to compute with, substituting 44100 for a missing rate."""
    if sample_rate <= 0:
        logger.warning(f"Sample rate reported as {sample_rate}, assuming {FALLBACK_SAMPLE_RATE} Hz")
        return FALLBACK_SAMPLE_RATE
    return sample_rate


def duration_seconds(num_frames: int, sample_rate: int) -> float:
    """Length of num_frames frames in seconds."""
    return num_frames / effective_sample_rate(sample_rate)


class PlaybackControl:
    """
    Pausable, stoppable frame source handed to the output device.

    While paused, read() returns silence without touching the source, so
    resuming continues at exactly the same frame. After stop(), read()
    returns an empty block and the device drops this source.

    The audio thread never waits on the lock: if a user action holds it,
    that block is rendered as silence.
    """

    def __init__(self, source: Resampler):
        self._source = source
        self._num_channels = source.num_channels
        self._lock = threading.Lock()
        self._paused = False
        self._stopped = False

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def position(self) -> int:
        """Source frame playback currently stands at."""
        with self._lock:
            return self._source.source_position

    def read(self, num_frames: int) -> npt.NDArray[np.float32]:
        """Pull the next block (audio thread)."""
        if not self._lock.acquire(blocking=False):
            return np.zeros((num_frames, self._num_channels), dtype=np.float32)
        try:
            if self._stopped:
                return np.zeros((0, self._num_channels), dtype=np.float32)
            if self._paused:
                return np.zeros((num_frames, self._num_channels), dtype=np.float32)
            return self._source.read(num_frames)
        finally:
            self._lock.release()

    def pause(self) -> int:
        """
        Halt sample production.

        Returns:
            The source frame at which playback halted
        """
        with self._lock:
            self._paused = True
            return self._source.source_position

    def resume(self) -> None:
        with self._lock:
            self._paused = False

    def stop(self) -> None:
        """Finish this source and close the stream behind it. Idempotent."""
        with self._lock:
            if self._stopped:
                return
            self._paused = False
            self._stopped = True
            self._source.close()


class PlaybackSession:
    """
    One playing stream: decoded stream, resampler, control and done signal.

    `done` is set when the device reports the source exhausted or when the
    session is closed. `cancelled` tells the two apart.
    """

    def __init__(self, stream: DecodedStream, audio_format: AudioFormat, control: PlaybackControl, start_frame: int = 0):
        self.stream = stream
        self.format = audio_format
        self.control = control
        self.start_frame = start_frame
        self.done = threading.Event()
        self.cancelled = False

    @property
    def num_frames(self) -> int:
        return self.stream.num_frames

    @property
    def position(self) -> int:
        return self.control.position

    @property
    def completed(self) -> bool:
        """True once the stream ran out on its own."""
        return self.done.is_set() and not self.cancelled

    def pause(self) -> int:
        """Set the pause flag and return the captured frame position."""
        return self.control.pause()

    def resume(self) -> None:
        self.control.resume()

    def close(self) -> None:
        """Discard the session: stop the control, release the stream, wake waiters."""
        self.cancelled = True
        self.control.stop()
        self.done.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the session is done or closed."""
        return self.done.wait(timeout)

    def _on_device_done(self) -> None:
        # Runs on the audio thread
        self.done.set()

    def __repr__(self) -> str:
        return f"PlaybackSession({self.stream!r}, start_frame={self.start_frame})"


def start_session(
    stream: DecodedStream,
    audio_format: AudioFormat,
    device: "OutputDevice",
    start_frame: int = 0,
) -> PlaybackSession:
    """
    Start playing a stream on the shared output device.

    Args:
        stream: Freshly decoded stream (ownership passes to the session)
        audio_format: Format of the stream
        device: Shared output device
        start_frame: Frame to start from; > 0 seeks first (sample-accurate resume)

    Returns:
        The running session

    Raises:
        AudioDeviceError: If the device cannot accept another source
    """
    try:
        if start_frame > 0:
            stream.seek(start_frame)

        resampler = Resampler(
            stream,
            from_rate=effective_sample_rate(audio_format.sample_rate),
            to_rate=device.sample_rate,
        )
        control = PlaybackControl(resampler)
        session = PlaybackSession(stream, audio_format, control, start_frame=start_frame)
        device.submit(control, session._on_device_done)
    except Exception:
        stream.close()
        raise

    logger.debug(
        f"Session started for {stream.path.name} at frame {start_frame} "
        f"({audio_format.sample_rate} Hz -> {device.sample_rate} Hz)"
    )
    return session
