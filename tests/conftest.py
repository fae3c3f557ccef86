"""Pytest fixtures for tests."""

import threading
import time
from pathlib import Path
from typing import Callable

import numpy as np
import pytest
import soundfile as sf

from padboard.audio import AudioDecoder, OutputDevice


def write_wav(path: Path, data: np.ndarray, sample_rate: int = 44100) -> Path:
    """Write float samples as a 32-bit float WAV (values survive exactly)."""
    sf.write(str(path), data, sample_rate, subtype="FLOAT")
    return path


def ramp(num_frames: int, num_channels: int = 1) -> np.ndarray:
    """Strictly increasing samples in [0, 0.5): every frame is distinguishable."""
    column = (np.arange(num_frames, dtype=np.float32) / num_frames * 0.5).astype(np.float32)
    if num_channels == 1:
        return column
    return np.column_stack([column] * num_channels)


def wait_until(condition: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll condition until it holds or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.005)
    return condition()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> None:
        with self._lock:
            self._now += seconds


@pytest.fixture
def temp_dir(tmp_path):
    """Per-test directory for generated audio and saved state."""
    return tmp_path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def decoder():
    return AudioDecoder()


@pytest.fixture
def device():
    """Output device that is never started; tests pull audio with render()."""
    return OutputDevice(sample_rate=44100, buffer_size=4410, num_channels=2)


@pytest.fixture
def three_second_wav(temp_dir):
    """3.0 s, 44100 Hz mono ramp."""
    return write_wav(temp_dir / "three_seconds.wav", ramp(3 * 44100))


@pytest.fixture
def short_wav(temp_dir):
    """0.1 s, 44100 Hz mono ramp (exactly one device block)."""
    return write_wav(temp_dir / "short.wav", ramp(4410))


@pytest.fixture
def stereo_wav(temp_dir):
    """0.5 s, 48000 Hz stereo sine."""
    t = np.arange(24000, dtype=np.float32) / 48000
    left = 0.3 * np.sin(2 * np.pi * 440 * t)
    right = 0.3 * np.sin(2 * np.pi * 660 * t)
    return write_wav(temp_dir / "stereo.wav", np.column_stack([left, right]).astype(np.float32), 48000)


@pytest.fixture
def half_rate_wav(temp_dir):
    """2.0 s, 22050 Hz mono ramp."""
    return write_wav(temp_dir / "half_rate.wav", ramp(2 * 22050), 22050)
