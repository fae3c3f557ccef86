"""
Per-pad playback state machine.

    STOPPED --play--> PLAYING --pause--> PAUSED
       ^                 |                 |
       +------stop-------+<----resume------+
       +----------------------stop---------+

Elapsed time is derived from wall-clock anchors rather than by asking the
audio thread: while playing, elapsed = now - start_time + paused_elapsed;
while paused it is frozen at paused_elapsed. A seek or a start from the cue
point moves paused_elapsed to the new position.
"""

import logging
import threading
import time
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from padboard.audio import (
    AudioDecoder,
    AudioFormat,
    AudioInfo,
    OutputDevice,
    PlaybackSession,
    duration_seconds,
    start_session,
)
from padboard.audio.session import effective_sample_rate
from padboard.models import Color, PadState
from padboard.protocols import PadEvent, PadObserver
from padboard.utils import ObserverManager, format_time

from .progress import CancellationToken, ProgressReporter, clamp_fraction

logger = logging.getLogger(__name__)

PLAYING_PREFIX = "▶ "
PAUSED_PREFIX = "⏸ "


@dataclass(frozen=True, slots=True)
class PadSnapshot:
    """Everything a presentation layer needs to draw one pad."""

    pad_id: str
    path: Path
    label: str
    color: Color
    state: PadState
    progress: float
    elapsed: float
    total_duration: float
    cue: Optional[float] = None

    @property
    def elapsed_label(self) -> str:
        return format_time(self.elapsed)

    @property
    def total_label(self) -> str:
        return format_time(self.total_duration)


class _Emission(NamedTuple):
    """Notifications decided under the pad lock, sent after it is released."""

    event: PadEvent
    generation: int
    progress: Optional[float] = None


class PadPlayer:
    """
    One pad: a clip, its playback session and its display timing.

    Every public operation takes the pad's lock, so concurrent user actions
    (a double click, say) are applied one after the other, never
    interleaved. Observers are notified after the lock is released, so an
    observer may query the pad from any thread.

    Each transition bumps a generation counter. Progress is published under
    a separate per-pad lock and dropped when its generation is no longer
    current, so a reporter tick that was already running cannot overwrite
    what Stop, completion or a seek displayed. Observers must therefore not
    block in on_progress waiting for another thread that drives this pad.

    The pad owns its session exclusively: a session exists exactly while
    the state is PLAYING or PAUSED (unless the stream was released while
    paused, see release_stream()).
    """

    def __init__(
        self,
        pad_id: str,
        path: Path,
        info: AudioInfo,
        device: OutputDevice,
        decoder: Optional[AudioDecoder] = None,
        color: Optional[Color] = None,
        progress_interval: float = 0.1,
        observers: Optional[ObserverManager[PadObserver]] = None,
        clock: Callable[[], float] = time.monotonic,
        name: Optional[str] = None,
        cue: Optional[float] = None,
    ):
        """
        Args:
            pad_id: Stable identifier
            path: Clip location
            info: Probed format and length of the clip
            device: Shared output device
            decoder: Decoder used for every play (a default one if omitted)
            color: Decorative color (white if omitted)
            progress_interval: Seconds between progress updates
            observers: Where events and progress are published
            clock: Monotonic time source in seconds
            name: Caption replacing the file stem
            cue: Cue point in seconds (clamped to the clip)
        """
        self.pad_id = pad_id
        self.path = Path(path)
        self.format: AudioFormat = info.format
        self.num_frames = info.num_frames
        self.total_duration = duration_seconds(info.num_frames, info.format.sample_rate)
        self.color = color or Color.white()
        self.custom_name = self._clean_name(name)
        self.progress_interval = progress_interval

        self._device = device
        self._decoder = decoder or AudioDecoder()
        self._observers = observers if observers is not None else ObserverManager[PadObserver](
            observer_type_name="pad"
        )
        self._clock = clock
        self._lock = threading.RLock()
        self._publish_lock = threading.RLock()
        self._generation = 0

        # Playback state
        self._state = PadState.STOPPED
        self._session: Optional[PlaybackSession] = None
        self._reporter: Optional[ProgressReporter] = None

        # Timing anchors
        self._start_time: Optional[float] = None
        self._paused_elapsed = 0.0
        self._paused_frame = 0
        self._progress = 0.0

        self._cue = None if cue is None else min(max(cue, 0.0), self.total_duration)

    # =================================================================
    # Queries
    # =================================================================

    @property
    def state(self) -> PadState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state == PadState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self._state == PadState.PAUSED

    @property
    def paused_frame(self) -> int:
        """Source frame captured by the last pause (0 when stopped)."""
        return self._paused_frame

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def cue(self) -> Optional[float]:
        """Cue point in seconds, if one is set."""
        return self._cue

    @property
    def name(self) -> str:
        """The custom caption, or the file stem when none is set."""
        return self.custom_name or self.path.stem

    @property
    def label(self) -> str:
        """Button caption: the name, marked while playing or paused."""
        if self._state == PadState.PLAYING:
            return PLAYING_PREFIX + self.name
        if self._state == PadState.PAUSED:
            return PAUSED_PREFIX + self.name
        return self.name

    def elapsed(self) -> float:
        """Seconds of the clip played so far, clamped to [0, total_duration]."""
        with self._lock:
            return self._elapsed_locked()

    def progress(self) -> float:
        """Displayed progress in [0, 1]."""
        with self._lock:
            return self._progress_locked()

    def latest_progress(self) -> Optional[float]:
        """Take the newest fraction published by the running reporter, if any."""
        reporter = self._reporter
        if reporter is None:
            return None
        return reporter.mailbox.take()

    def snapshot(self) -> PadSnapshot:
        with self._lock:
            return PadSnapshot(
                pad_id=self.pad_id,
                path=self.path,
                label=self.label,
                color=self.color,
                state=self._state,
                progress=self._progress_locked(),
                elapsed=self._elapsed_locked(),
                total_duration=self.total_duration,
                cue=self._cue,
            )

    # =================================================================
    # Transitions
    # =================================================================

    def toggle(self) -> PadState:
        """
        The single user-facing control: play, pause or resume.

        Returns:
            The state after the action
        """
        with self._lock:
            if self._state == PadState.PLAYING:
                emission = self._pause_locked()
            elif self._state == PadState.PAUSED:
                emission = self._resume_locked()
            else:
                emission = self._play_locked(start_frame=0)
            state = self._state
        self._emit(emission)
        return state

    def play(self) -> None:
        """
        Start the clip from the beginning.

        Any session already running on this pad is stopped first.

        Raises:
            AudioError: If the clip can no longer be decoded
            AudioDeviceError: If the output device refuses the session
        """
        with self._lock:
            emission = self._play_locked(start_frame=0)
        self._emit(emission)

    def pause(self) -> bool:
        """
        Pause a playing pad, capturing the exact source frame.

        Returns:
            True if the pad was playing
        """
        with self._lock:
            emission = self._pause_locked()
        self._emit(emission)
        return emission is not None

    def resume(self) -> bool:
        """
        Continue a paused pad from the captured frame.

        Resumes in place when the session is still held; otherwise the clip
        is decoded again and started at the saved frame.

        Returns:
            True if the pad was paused

        Raises:
            AudioError: If a re-decode is needed and fails
        """
        with self._lock:
            emission = self._resume_locked()
        self._emit(emission)
        return emission is not None

    def stop(self) -> bool:
        """
        Stop playback and reset progress to zero.

        A no-op on a pad that is already stopped.

        Returns:
            True if anything was stopped
        """
        with self._lock:
            if self._state == PadState.STOPPED and self._session is None:
                return False
            self._reset_locked(progress=0.0)
            emission = _Emission(PadEvent.STOPPED, self._generation, 0.0)

        logger.debug(f"Pad {self.name} stopped")
        self._emit(emission)
        return True

    def restart(self) -> None:
        """Reset to ready: stop and zero the progress display. Does not replay."""
        with self._lock:
            self._reset_locked(progress=0.0)
            emission = _Emission(PadEvent.RESTARTED, self._generation, 0.0)

        logger.debug(f"Pad {self.name} restarted")
        self._emit(emission)

    def seek(self, fraction: float) -> bool:
        """
        Jump to ``fraction`` of the clip (clamped to [0, 1]).

        A playing pad continues from the new position; a paused pad stays
        paused and starts there on resume. Stopped pads ignore seeks.

        Returns:
            True if the position changed

        Raises:
            AudioError: If the clip can no longer be decoded
        """
        frame = round(clamp_fraction(fraction) * self.num_frames)
        with self._lock:
            emission = self._seek_locked(frame)
        self._emit(emission)
        return emission is not None

    def set_cue(self) -> Optional[float]:
        """
        Mark the current position of a playing or paused pad as its cue.

        Returns:
            The cue in seconds, or None if the pad is stopped
        """
        with self._lock:
            if self._state == PadState.STOPPED:
                return None
            self._cue = self._elapsed_locked()
            cue = self._cue
            emission = _Emission(PadEvent.CUE_CHANGED, self._generation)

        logger.debug(f"Pad {self.name} cue set at {cue:.3f}s")
        self._emit(emission)
        return cue

    def clear_cue(self) -> bool:
        with self._lock:
            if self._cue is None:
                return False
            self._cue = None
            emission = _Emission(PadEvent.CUE_CHANGED, self._generation)
        self._emit(emission)
        return True

    def play_from_cue(self) -> bool:
        """
        Start (or, when already playing or paused, jump) at the cue point.

        Returns:
            False if no cue is set

        Raises:
            AudioError: If the clip can no longer be decoded
        """
        with self._lock:
            if self._cue is None:
                return False
            frame = self._frame_at(self._cue)
            if self._state == PadState.STOPPED:
                emission = self._play_locked(start_frame=frame)
            else:
                emission = self._seek_locked(frame)
        self._emit(emission)
        return True

    def rename(self, name: Optional[str]) -> str:
        """Set the caption; a blank name restores the file stem. Returns the new name."""
        self.custom_name = self._clean_name(name)
        return self.name

    def release_stream(self) -> bool:
        """
        Close the file behind a paused pad, keeping its position.

        The next resume decodes the clip again and seeks to the saved frame.

        Returns:
            True if a stream was released
        """
        with self._lock:
            if self._state != PadState.PAUSED or self._session is None:
                return False
            self._session.close()
            self._session = None
        logger.debug(f"Pad {self.name} released its stream at frame {self._paused_frame}")
        return True

    # =================================================================
    # Internals (call with the lock held)
    # =================================================================

    def _play_locked(self, start_frame: int) -> _Emission:
        if self._session is not None or self._state != PadState.STOPPED:
            self._reset_locked(progress=0.0)

        self._begin_session(start_frame=start_frame)
        self._paused_elapsed = self._seconds_at(start_frame)
        self._paused_frame = 0
        self._start_time = self._clock()
        self._progress = 0.0
        self._state = PadState.PLAYING
        self._generation += 1
        self._start_reporter()

        logger.debug(f"Pad {self.name} playing from frame {start_frame} ({self.total_duration:.3f}s)")
        return _Emission(PadEvent.PLAYING, self._generation, self._progress_locked())

    def _pause_locked(self) -> Optional[_Emission]:
        if self._state != PadState.PLAYING or self._session is None:
            return None

        self._paused_frame = self._session.pause()
        self._paused_elapsed += self._clock() - self._start_time
        self._start_time = None
        self._cancel_reporter()
        self._state = PadState.PAUSED
        self._generation += 1

        logger.debug(
            f"Pad {self.name} paused at frame {self._paused_frame} (elapsed {self._paused_elapsed:.3f}s)"
        )
        return _Emission(PadEvent.PAUSED, self._generation)

    def _resume_locked(self) -> Optional[_Emission]:
        if self._state != PadState.PAUSED:
            return None

        if self._session is not None and not self._session.done.is_set():
            self._session.resume()
        else:
            if self._session is not None:
                self._session.close()
                self._session = None
            self._begin_session(start_frame=self._paused_frame)
            self._paused_elapsed = self._seconds_at(self._paused_frame)

        self._start_time = self._clock()
        self._state = PadState.PLAYING
        self._generation += 1
        self._start_reporter()

        logger.debug(f"Pad {self.name} resumed at {self._paused_elapsed:.3f}s")
        return _Emission(PadEvent.RESUMED, self._generation)

    def _seek_locked(self, frame: int) -> Optional[_Emission]:
        if self._state == PadState.STOPPED:
            return None

        if self._state == PadState.PLAYING:
            previous = self._session
            self._begin_session(start_frame=frame)
            if previous is not None:
                previous.close()
            self._start_time = self._clock()
        else:
            # Paused: the next resume decodes again from the new frame
            if self._session is not None:
                self._session.close()
                self._session = None
            self._paused_frame = frame

        self._paused_elapsed = self._seconds_at(frame)
        self._generation += 1
        if self._state == PadState.PLAYING:
            self._start_reporter()

        logger.debug(f"Pad {self.name} seeked to frame {frame}")
        return _Emission(PadEvent.SEEKED, self._generation, self._progress_locked())

    def _elapsed_locked(self) -> float:
        if self._state == PadState.PLAYING and self._start_time is not None:
            elapsed = self._clock() - self._start_time + self._paused_elapsed
        elif self._state == PadState.PAUSED:
            elapsed = self._paused_elapsed
        else:
            elapsed = self._progress * self.total_duration
        return min(max(elapsed, 0.0), self.total_duration)

    def _progress_locked(self) -> float:
        if self._state == PadState.STOPPED:
            return self._progress
        if self.total_duration <= 0:
            return 0.0
        return self._elapsed_locked() / self.total_duration

    def _seconds_at(self, frame: int) -> float:
        return frame / effective_sample_rate(self.format.sample_rate)

    def _frame_at(self, seconds: float) -> int:
        frame = round(seconds * effective_sample_rate(self.format.sample_rate))
        return min(max(frame, 0), self.num_frames)

    def _begin_session(self, start_frame: int) -> None:
        stream, fmt = self._decoder.decode(self.path)
        session = start_session(stream, fmt, self._device, start_frame=start_frame)
        self._session = session

        waiter = threading.Thread(
            target=self._wait_for_completion,
            args=(session,),
            name=f"pad-{self.pad_id[:8]}-done",
            daemon=True,
        )
        waiter.start()

    def _reset_locked(self, progress: float) -> None:
        self._cancel_reporter()
        if self._session is not None:
            self._session.close()
            self._session = None
        self._state = PadState.STOPPED
        self._start_time = None
        self._paused_elapsed = 0.0
        self._paused_frame = 0
        self._progress = progress
        self._generation += 1

    def _start_reporter(self) -> None:
        self._cancel_reporter()
        if self.total_duration <= 0:
            logger.warning(f"Pad {self.name} has no duration, progress updates disabled")
            return

        token = CancellationToken()
        self._reporter = ProgressReporter(
            self.progress_interval,
            sample=partial(self._sample_progress, token),
            publish=partial(self._publish_progress, generation=self._generation),
            token=token,
            name=f"pad-{self.pad_id[:8]}-progress",
        )
        self._reporter.start()

    def _cancel_reporter(self) -> None:
        if self._reporter is not None:
            self._reporter.cancel()
            self._reporter = None

    def _sample_progress(self, token: CancellationToken) -> Optional[float]:
        with self._lock:
            if token.cancelled or self._state != PadState.PLAYING:
                return None
            return self._elapsed_locked() / self.total_duration

    def _wait_for_completion(self, session: PlaybackSession) -> None:
        session.wait()

        with self._lock:
            if session.cancelled or session is not self._session:
                return
            self._reset_locked(progress=1.0)
            emission = _Emission(PadEvent.FINISHED, self._generation, 1.0)

        logger.debug(f"Pad {self.name} finished")
        self._emit(emission)

    @staticmethod
    def _clean_name(name: Optional[str]) -> Optional[str]:
        if name is None:
            return None
        return name.strip() or None

    # =================================================================
    # Notification (never with the pad lock held)
    # =================================================================

    def _emit(self, emission: Optional[_Emission]) -> None:
        if emission is None:
            return
        self._observers.notify("on_pad_event", emission.event, self.pad_id)
        if emission.progress is not None:
            self._publish_progress(emission.progress, generation=emission.generation)

    def _publish_progress(self, fraction: float, generation: int) -> None:
        with self._publish_lock:
            if generation != self._generation:
                return
            self._observers.notify(
                "on_progress",
                self.pad_id,
                fraction,
                format_time(fraction * self.total_duration),
                format_time(self.total_duration),
            )

    def __repr__(self) -> str:
        return f"PadPlayer(id={self.pad_id[:8]}, path={self.path.name}, state={self._state.value})"
