"""Shared audio output device and stream management."""

import logging
import queue
import threading
from typing import Callable, Optional

import numpy as np
import numpy.typing as npt
import sounddevice as sd

from padboard.exceptions import AudioDeviceError, ErrorContext, wrap_audio_device_error

from .mixer import AudioMixer, FrameSource, Voice

logger = logging.getLogger(__name__)

# Sources waiting to be picked up by the audio thread
SUBMIT_QUEUE_SIZE = 256


class OutputDevice:
    """
    The process-wide audio output.

    Owns one sounddevice OutputStream. Any number of frame sources can be
    submitted from any thread; the audio callback mixes them and reports
    each one through its on_done callback when it runs out of frames.

    Submission never blocks: sources pass to the audio thread through a
    bounded queue and the callback owns the voice list from then on.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        buffer_size: int = 4410,
        num_channels: int = 2,
        device: Optional[int] = None,
    ):
        """
        Initialize output device.

        Args:
            sample_rate: Stream sample rate in Hz
            buffer_size: Frames per callback block
            num_channels: Number of output channels (1=mono, 2=stereo)
            device: Output device ID (None for default)
        """
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.num_channels = num_channels
        self.device = device

        self._mixer = AudioMixer(num_channels)
        self._pending: queue.Queue[Voice] = queue.Queue(maxsize=SUBMIT_QUEUE_SIZE)
        self._voices: list[Voice] = []

        # Stream state
        self._stream: Optional[sd.OutputStream] = None
        self._is_running = False

    def submit(self, source: FrameSource, on_done: Callable[[], None] | None = None) -> None:
        """
        Start mixing a source into the output.

        Args:
            source: Object with read(num_frames) returning float32 frames
            on_done: Called on the audio thread once source returns a short block

        Raises:
            AudioDeviceError: If too many sources are waiting to start
        """
        try:
            self._pending.put_nowait(Voice(source, on_done))
        except queue.Full:
            raise AudioDeviceError(
                "Too many sounds are starting at once",
                device_id=self.device,
                technical_message=f"Submit queue full ({SUBMIT_QUEUE_SIZE} pending)",
                recoverable=True,
                recovery_hint="Try again in a moment",
            )

    def render(self, num_frames: int) -> npt.NDArray[np.float32]:
        """
        Produce the next block of mixed output.

        This is the body of the audio callback; it is public so the mix can
        be driven without hardware.
        """
        while True:
            try:
                self._voices.append(self._pending.get_nowait())
            except queue.Empty:
                break

        output, finished = self._mixer.mix(self._voices, num_frames)

        for voice in finished:
            self._voices.remove(voice)
            if voice.on_done is not None:
                try:
                    voice.on_done()
                except Exception as e:
                    logger.error(f"Error in playback completion callback: {e}")

        return output

    def start(self) -> None:
        """
        Open the sounddevice stream and begin calling render().

        Raises:
            AudioDeviceError: If PortAudio refuses the stream
        """
        if self._is_running:
            return

        self._describe_target()
        try:
            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                blocksize=self.buffer_size,
                channels=self.num_channels,
                device=self.device,
                dtype=np.float32,
                callback=self._audio_callback,
            )
            stream.start()
        except Exception as e:
            raise wrap_audio_device_error(e, self.device) from e

        self._stream = stream
        self._is_running = True
        block_ms = 1000 * self.buffer_size / self.sample_rate
        logger.info(
            f"Output open: {self.sample_rate} Hz, {self.num_channels} ch, "
            f"{self.buffer_size}-frame blocks ({block_ms:.1f} ms), "
            f"reported latency {self.latency * 1000:.1f} ms"
        )

    def stop(self) -> None:
        """Close the stream. Voices still in the mix are dropped without on_done."""
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.stop()
            stream.close()
        if self._is_running:
            self._is_running = False
            logger.info("Output closed")

    def _describe_target(self) -> None:
        if self.device is None:
            logger.info("Opening system default output")
            return
        entry = sd.query_devices(self.device)
        api = sd.query_hostapis(entry["hostapi"])["name"]
        logger.info(f"Opening output {self.device}: {entry['name']} via {api}")

    def _audio_callback(self, outdata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            logger.warning(f"PortAudio reported {status}")
        try:
            outdata[:] = self.render(frames)
        except Exception:
            logger.exception("Mixing failed; writing a silent block")
            outdata.fill(0)

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def active_voices(self) -> int:
        """Number of sources currently being mixed."""
        return len(self._voices)

    @property
    def latency(self) -> float:
        """Output latency in seconds as reported by PortAudio, 0.0 when closed."""
        return self._stream.latency if self._stream is not None else 0.0

    @property
    def device_name(self) -> str:
        """Human-readable name of the target output, for banners."""
        target = self.device if self.device is not None else self.get_default_device()
        if target is None or target < 0:
            return "system default"
        try:
            return sd.query_devices(target)["name"]
        except Exception:
            logger.debug(f"Cannot query device {target}", exc_info=True)
            return f"device {target}"

    @staticmethod
    def list_output_devices() -> list[tuple[int, str, str, dict]]:
        """Every device with at least one output channel, as (id, name, host API, info)."""
        apis = sd.query_hostapis()
        outputs = []
        for index, entry in enumerate(sd.query_devices()):
            if entry["max_output_channels"] > 0:
                outputs.append((index, entry["name"], apis[entry["hostapi"]]["name"], entry))
        return outputs

    @staticmethod
    def get_default_device() -> int:
        """PortAudio's default output device id (-1 if there is none)."""
        return sd.default.device[1]

    def __enter__(self) -> "OutputDevice":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


_shared_device: Optional[OutputDevice] = None
_shared_lock = threading.Lock()


def init_output_device(
    sample_rate: int = 44100,
    buffer_size: int = 4410,
    num_channels: int = 2,
    device: Optional[int] = None,
    start: bool = True,
) -> OutputDevice:
    """
    Create (once per process) and return the shared output device.

    Later calls return the existing device; differing arguments are ignored.

    Raises:
        AudioDeviceError: If the stream cannot be started
    """
    global _shared_device
    with _shared_lock:
        if _shared_device is None:
            output = OutputDevice(sample_rate, buffer_size, num_channels, device)
            if start:
                with ErrorContext("start output device", logger):
                    output.start()
            _shared_device = output
        elif (sample_rate, num_channels, device) != (
            _shared_device.sample_rate,
            _shared_device.num_channels,
            _shared_device.device,
        ):
            logger.warning("Output device already initialized; ignoring new settings")
        return _shared_device


def get_output_device() -> Optional[OutputDevice]:
    """The shared output device, if one has been initialized."""
    return _shared_device


def shutdown_output_device() -> None:
    """Stop and discard the shared output device."""
    global _shared_device
    with _shared_lock:
        if _shared_device is not None:
            _shared_device.stop()
            _shared_device = None
