"""Streaming sample-rate conversion."""

import numpy as np
import numpy.typing as npt

from .decoder import DecodedStream


class Resampler:
    """
    Convert a DecodedStream to the output device's sample rate.

    Linear interpolation, applied block by block with the fractional
    read position carried between blocks so block boundaries are seamless.
    Equal rates pass frames through untouched.

    The resampler reads ahead of what it has emitted; `source_position`
    accounts for that so callers can capture the exact frame where
    playback stands.
    """

    def __init__(self, source: DecodedStream, from_rate: int, to_rate: int):
        """
        Args:
            source: Stream to pull frames from
            from_rate: Sample rate of the source in Hz
            to_rate: Sample rate to produce in Hz

        Raises:
            ValueError: If either rate is not positive
        """
        if from_rate <= 0 or to_rate <= 0:
            raise ValueError(f"Sample rates must be positive (got {from_rate} -> {to_rate})")

        self._source = source
        self.from_rate = from_rate
        self.to_rate = to_rate
        self.num_channels = source.format.num_channels

        self._step = from_rate / to_rate  # source frames per output frame
        self._buffer = np.zeros((0, self.num_channels), dtype=np.float32)
        self._phase = 0.0  # buffer index (fractional) of the next output frame
        self._exhausted = False

    @property
    def passthrough(self) -> bool:
        return self.from_rate == self.to_rate

    @property
    def source_position(self) -> int:
        """Source frame that the next output frame is taken from."""
        if self.passthrough:
            return self._source.position
        buffered_start = self._source.position - len(self._buffer)
        return buffered_start + int(self._phase)

    def read(self, num_frames: int) -> npt.NDArray[np.float32]:
        """
        Produce up to num_frames output frames.

        Returns:
            Array of shape (frames, num_channels); short means end of stream.
        """
        if self.passthrough:
            return self._source.read(num_frames)

        if num_frames <= 0:
            return np.zeros((0, self.num_channels), dtype=np.float32)

        positions = self._phase + np.arange(num_frames, dtype=np.float64) * self._step
        # Interpolating the last position needs the frame after it
        self._fill(int(positions[-1]) + 2)

        available = len(self._buffer)
        if self._exhausted:
            positions = positions[positions <= available - 1]
            if len(positions) == 0:
                self._buffer = self._buffer[available:]
                return np.zeros((0, self.num_channels), dtype=np.float32)

        index = positions.astype(np.int64)
        frac = (positions - index).astype(np.float32)[:, np.newaxis]
        following = np.minimum(index + 1, available - 1)

        output = self._buffer[index] * (1.0 - frac) + self._buffer[following] * frac

        advanced = self._phase + len(positions) * self._step
        consumed = min(int(advanced), available)
        self._buffer = self._buffer[consumed:]
        self._phase = advanced - consumed

        return output.astype(np.float32, copy=False)

    def close(self) -> None:
        """Close the underlying stream."""
        self._source.close()

    def _fill(self, needed: int) -> None:
        missing = needed - len(self._buffer)
        if missing <= 0 or self._exhausted:
            return

        chunk = self._source.read(missing)
        if len(chunk) < missing:
            self._exhausted = True
        if len(chunk):
            self._buffer = np.concatenate([self._buffer, chunk])
