"""Audio mixer for combining concurrently playing sources."""

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """Anything the mixer can pull float32 frames from."""

    def read(self, num_frames: int) -> npt.NDArray[np.float32]:
        """Return up to num_frames frames; fewer means the source is finished."""
        ...


@dataclass(slots=True)
class Voice:
    """A source attached to the mixer and the callback to run when it finishes."""

    source: FrameSource
    on_done: Callable[[], None] | None = None


class AudioMixer:
    """Sums voices into one float32 block. Only the audio thread calls it."""

    def __init__(self, num_channels: int = 2):
        self.num_channels = num_channels

    def mix(self, voices: list[Voice], num_frames: int) -> tuple[npt.NDArray[np.float32], list[Voice]]:
        """
        Pull ``num_frames`` from each voice and add them together.

        Returns:
            The clipped ``(num_frames, num_channels)`` block, and the voices
            that came up short (or raised) and should be retired
        """
        block = np.zeros((num_frames, self.num_channels), dtype=np.float32)
        retired: list[Voice] = []

        for voice in voices:
            try:
                frames = voice.source.read(num_frames)
            except Exception:
                logger.exception(f"Source {voice.source!r} failed; removing it from the mix")
                retired.append(voice)
                continue

            count = min(len(frames), num_frames)
            if count:
                block[:count] += self._match_channels(frames[:count])
            if len(frames) < num_frames:
                retired.append(voice)

        self.clip(block)
        return block, retired

    def _match_channels(self, frames: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
        """Fold or duplicate ``frames`` to the output channel count."""
        have = frames.shape[1]
        want = self.num_channels
        if have == want:
            return frames
        if want == 1:
            return frames.mean(axis=1, keepdims=True, dtype=np.float32)
        if have == 1:
            return np.repeat(frames, want, axis=1)
        if have > want:
            return frames[:, :want]
        # Fewer source channels than outputs: leave the extra outputs silent
        padded = np.zeros((len(frames), want), dtype=np.float32)
        padded[:, :have] = frames
        return padded

    @staticmethod
    def clip(buffer: npt.NDArray[np.float32]) -> None:
        """Limit ``buffer`` to [-1.0, 1.0] in place."""
        np.clip(buffer, -1.0, 1.0, out=buffer)
