"""Tests for OutputDevice and AudioMixer (no audio hardware involved)."""

from unittest.mock import Mock, patch

import numpy as np
import pytest

from padboard.audio import AudioMixer, OutputDevice, Voice
from padboard.audio import device as device_module
from padboard.exceptions import AudioDeviceError, AudioDeviceInUseError


class ConstantSource:
    """Frame source producing a constant for a fixed number of frames."""

    def __init__(self, value: float, frames: int, channels: int = 1):
        self.value = value
        self.remaining = frames
        self.channels = channels

    def read(self, num_frames):
        n = min(num_frames, self.remaining)
        self.remaining -= n
        return np.full((n, self.channels), self.value, dtype=np.float32)


@pytest.mark.unit
class TestAudioMixer:

    def test_sums_voices(self):
        mixer = AudioMixer(num_channels=2)
        voices = [Voice(ConstantSource(0.25, 100)), Voice(ConstantSource(0.5, 100))]

        out, finished = mixer.mix(voices, 10)

        np.testing.assert_allclose(out, 0.75)
        assert finished == []

    def test_clips(self):
        mixer = AudioMixer(num_channels=2)
        voices = [Voice(ConstantSource(0.8, 100)), Voice(ConstantSource(0.8, 100))]

        out, _ = mixer.mix(voices, 10)

        assert out.max() == pytest.approx(1.0)

    def test_short_block_marks_voice_finished(self):
        mixer = AudioMixer(num_channels=2)
        voice = Voice(ConstantSource(0.5, 4))

        out, finished = mixer.mix([voice], 10)

        assert finished == [voice]
        np.testing.assert_allclose(out[:4], 0.5)
        np.testing.assert_allclose(out[4:], 0.0)

    def test_stereo_to_mono(self):
        mixer = AudioMixer(num_channels=1)
        frames = np.array([[0.2, 0.4]] * 4, dtype=np.float32)
        assert mixer._match_channels(frames).shape == (4, 1)
        np.testing.assert_allclose(mixer._match_channels(frames), 0.3)

    def test_multichannel_to_stereo(self):
        mixer = AudioMixer(num_channels=2)
        frames = np.zeros((4, 6), dtype=np.float32)
        assert mixer._match_channels(frames).shape == (4, 2)


@pytest.mark.unit
class TestOutputDeviceRender:

    def test_render_mixes_submitted_sources(self, device):
        device.submit(ConstantSource(0.1, 1000))
        device.submit(ConstantSource(0.2, 1000, channels=2))

        out = device.render(256)

        assert out.shape == (256, 2)
        np.testing.assert_allclose(out, 0.3, atol=1e-6)
        assert device.active_voices == 2

    def test_on_done_called_once_when_exhausted(self, device):
        on_done = Mock()
        device.submit(ConstantSource(0.1, 300), on_done)

        device.render(256)
        on_done.assert_not_called()
        device.render(256)
        device.render(256)

        on_done.assert_called_once_with()
        assert device.active_voices == 0

    def test_failing_on_done_does_not_break_render(self, device):
        device.submit(ConstantSource(0.1, 0), Mock(side_effect=RuntimeError("boom")))
        out = device.render(16)
        assert out.shape == (16, 2)

    def test_submit_queue_full(self, device):
        for _ in range(device_module.SUBMIT_QUEUE_SIZE):
            device.submit(ConstantSource(0.0, 1))

        with pytest.raises(AudioDeviceError):
            device.submit(ConstantSource(0.0, 1))

    def test_broken_source_is_dropped(self, device):
        class Broken:
            def read(self, n):
                raise RuntimeError("decoder exploded")

        on_done = Mock()
        device.submit(Broken(), on_done)
        device.submit(ConstantSource(0.25, 100))

        out = device.render(16)

        np.testing.assert_allclose(out, 0.25)
        on_done.assert_called_once_with()
        assert device.active_voices == 1

    def test_callback_outputs_silence_on_error(self, device):
        outdata = np.ones((32, 2), dtype=np.float32)

        with patch.object(device, "render", side_effect=RuntimeError("boom")):
            device._audio_callback(outdata, 32, None, None)

        assert not outdata.any()

    def test_callback_writes_mix(self, device):
        device.submit(ConstantSource(0.5, 100))
        outdata = np.zeros((32, 2), dtype=np.float32)

        device._audio_callback(outdata, 32, None, None)

        np.testing.assert_allclose(outdata, 0.5)


@pytest.mark.unit
class TestOutputDeviceStream:

    @patch("padboard.audio.device.sd")
    def test_start_opens_float32_stream(self, mock_sd):
        mock_sd.default.device = [None, -1]
        mock_sd.OutputStream.return_value.latency = 0.1
        output = OutputDevice(sample_rate=44100, buffer_size=4410, num_channels=2)

        output.start()

        kwargs = mock_sd.OutputStream.call_args.kwargs
        assert kwargs["samplerate"] == 44100
        assert kwargs["blocksize"] == 4410
        assert kwargs["channels"] == 2
        assert kwargs["dtype"] == np.float32
        assert output.is_running

        output.stop()
        mock_sd.OutputStream.return_value.close.assert_called_once()
        assert not output.is_running

    @patch("padboard.audio.device.sd")
    def test_device_in_use_is_wrapped(self, mock_sd):
        mock_sd.default.device = [None, -1]
        mock_sd.OutputStream.side_effect = Exception("Error opening OutputStream: [PaErrorCode -9996]")
        output = OutputDevice()

        with pytest.raises(AudioDeviceInUseError):
            output.start()
        assert not output.is_running


@pytest.mark.unit
class TestSharedDevice:

    def teardown_method(self):
        device_module.shutdown_output_device()

    def test_init_once(self):
        first = device_module.init_output_device(start=False)
        second = device_module.init_output_device(sample_rate=48000, start=False)

        assert first is second
        assert first.sample_rate == 44100
        assert device_module.get_output_device() is first

    def test_shutdown_forgets_device(self):
        first = device_module.init_output_device(start=False)
        device_module.shutdown_output_device()

        assert device_module.get_output_device() is None
        assert device_module.init_output_device(start=False) is not first


@pytest.mark.unit
class TestListDevices:

    @patch("padboard.audio.device.sd")
    def test_lists_only_output_devices(self, mock_sd):
        mock_sd.query_devices.return_value = [
            {"name": "Mic", "hostapi": 0, "max_output_channels": 0},
            {"name": "Speakers", "hostapi": 0, "max_output_channels": 2},
        ]
        mock_sd.query_hostapis.return_value = [{"name": "ALSA"}]

        devices = OutputDevice.list_output_devices()

        assert [(d[0], d[1], d[2]) for d in devices] == [(1, "Speakers", "ALSA")]

    @patch("padboard.audio.device.sd")
    def test_device_name_of_explicit_device(self, mock_sd):
        mock_sd.query_devices.return_value = {"name": "Speakers", "hostapi": 0}

        assert OutputDevice(device=3).device_name == "Speakers"
        mock_sd.query_devices.assert_called_once_with(3)

    @patch("padboard.audio.device.sd")
    def test_device_name_without_default(self, mock_sd):
        mock_sd.default.device = [None, -1]

        assert OutputDevice().device_name == "system default"
        mock_sd.query_devices.assert_not_called()

    @patch("padboard.audio.device.sd")
    def test_device_name_when_query_fails(self, mock_sd):
        mock_sd.query_devices.side_effect = Exception("PortAudio not initialized")

        assert OutputDevice(device=2).device_name == "device 2"
