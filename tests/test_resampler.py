"""Tests for the streaming Resampler."""

import numpy as np
import pytest

from conftest import ramp, write_wav
from padboard.audio import Resampler


def read_all(resampler: Resampler, block: int) -> np.ndarray:
    chunks = []
    while True:
        chunk = resampler.read(block)
        if len(chunk):
            chunks.append(chunk)
        if len(chunk) < block:
            break
    return np.concatenate(chunks)


@pytest.mark.unit
class TestResampler:

    def test_equal_rates_pass_through(self, decoder, temp_dir):
        data = ramp(1000)
        stream, fmt = decoder.decode(write_wav(temp_dir / "a.wav", data))
        with stream:
            resampler = Resampler(stream, 44100, 44100)
            assert resampler.passthrough
            out = read_all(resampler, 128)

        np.testing.assert_array_equal(out[:, 0], data)

    @pytest.mark.parametrize("block", [1, 7, 256, 5000])
    def test_upsample_by_two_is_seamless_across_blocks(self, decoder, temp_dir, block):
        data = ramp(1000)
        stream, _ = decoder.decode(write_wav(temp_dir / "a.wav", data, 22050))
        with stream:
            out = read_all(Resampler(stream, 22050, 44100), block)[:, 0]

        assert len(out) == 1999
        np.testing.assert_allclose(out[0::2], data, atol=1e-6)
        np.testing.assert_allclose(out[1::2], (data[:-1] + data[1:]) / 2, atol=1e-6)

    def test_downsample_halves_length(self, decoder, temp_dir):
        data = ramp(1000)
        stream, _ = decoder.decode(write_wav(temp_dir / "a.wav", data, 44100))
        with stream:
            out = read_all(Resampler(stream, 44100, 22050), 100)[:, 0]

        assert len(out) == 500
        np.testing.assert_allclose(out, data[0::2], atol=1e-6)

    def test_keeps_channel_count(self, decoder, stereo_wav):
        stream, fmt = decoder.decode(stereo_wav)
        with stream:
            block = Resampler(stream, fmt.sample_rate, 44100).read(441)
        assert block.shape == (441, 2)

    def test_source_position_tracks_output_not_read_ahead(self, decoder, temp_dir):
        stream, _ = decoder.decode(write_wav(temp_dir / "a.wav", ramp(10000), 22050))
        with stream:
            resampler = Resampler(stream, 22050, 44100)
            resampler.read(1000)
            # Reading has pulled one extra frame for interpolation
            assert stream.position > 500
            assert resampler.source_position == 500

    def test_source_position_pass_through(self, decoder, short_wav):
        stream, _ = decoder.decode(short_wav)
        with stream:
            resampler = Resampler(stream, 44100, 44100)
            resampler.read(300)
            assert resampler.source_position == 300

    def test_rejects_non_positive_rates(self, decoder, short_wav):
        stream, _ = decoder.decode(short_wav)
        with stream:
            with pytest.raises(ValueError):
                Resampler(stream, 0, 44100)

    def test_close_closes_source(self, decoder, short_wav):
        stream, _ = decoder.decode(short_wav)
        Resampler(stream, 22050, 44100).close()
        assert stream.closed
