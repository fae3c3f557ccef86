"""Tests for external-tool transcoding of .m4a clips."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from conftest import ramp, write_wav
from padboard.audio import AudioDecoder, find_transcoder, transcode_to_wav
from padboard.exceptions import (
    DecodeFailureError,
    ExternalToolFailureError,
    MissingExternalToolError,
)


@pytest.fixture
def m4a_file(temp_dir):
    path = temp_dir / "voice.m4a"
    path.write_bytes(b"\x00\x00\x00\x20ftypM4A fake payload")
    return path


def fake_ffmpeg(frames: int = 2205, returncode: int = 0, stderr: bytes = b""):
    """subprocess.run replacement that writes a WAV to the output argument."""
    calls = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        if returncode == 0:
            write_wav(Path(cmd[-1]), ramp(frames))
        return Mock(returncode=returncode, stderr=stderr)

    run.calls = calls
    return run


@pytest.mark.unit
class TestFindTranscoder:

    def test_missing_tool(self):
        with patch("padboard.audio.transcode.shutil.which", return_value=None):
            with pytest.raises(MissingExternalToolError) as exc_info:
                find_transcoder("ffmpeg")

        assert exc_info.value.tool == "ffmpeg"
        assert "ffmpeg" in exc_info.value.recovery_hint

    def test_found_tool(self):
        with patch("padboard.audio.transcode.shutil.which", return_value="/usr/bin/ffmpeg"):
            assert find_transcoder("ffmpeg") == "/usr/bin/ffmpeg"


@pytest.mark.unit
class TestTranscodeToWav:

    def test_command_line(self, m4a_file):
        run = fake_ffmpeg()
        with patch("padboard.audio.transcode.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("padboard.audio.transcode.subprocess.run", side_effect=run):
            out = transcode_to_wav(m4a_file)

        try:
            cmd = run.calls[0]
            assert cmd[:3] == ["/usr/bin/ffmpeg", "-i", str(m4a_file)]
            assert cmd[3:8] == ["-y", "-acodec", "pcm_s16le", "-ar", "44100"]
            assert cmd[-1] == str(out)
            assert out.suffix == ".wav"
        finally:
            out.unlink(missing_ok=True)

    def test_nonzero_exit_removes_temp_file(self, m4a_file):
        run = fake_ffmpeg(returncode=1, stderr=b"Invalid data found when processing input")
        with patch("padboard.audio.transcode.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("padboard.audio.transcode.subprocess.run", side_effect=run):
            with pytest.raises(ExternalToolFailureError) as exc_info:
                transcode_to_wav(m4a_file)

        assert exc_info.value.returncode == 1
        assert "Invalid data" in exc_info.value.stderr
        assert not Path(run.calls[0][-1]).exists()

    def test_launch_failure(self, m4a_file):
        with patch("padboard.audio.transcode.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("padboard.audio.transcode.subprocess.run", side_effect=PermissionError("denied")):
            with pytest.raises(ExternalToolFailureError):
                transcode_to_wav(m4a_file)


@pytest.mark.unit
class TestDecodeTranscoded:

    def test_m4a_without_tool_is_distinct_from_corrupt(self, m4a_file):
        decoder = AudioDecoder()
        with patch("padboard.audio.transcode.shutil.which", return_value=None):
            with pytest.raises(MissingExternalToolError):
                decoder.decode(m4a_file)

    def test_temp_file_removed_on_close(self, m4a_file):
        run = fake_ffmpeg(frames=2205)
        decoder = AudioDecoder()
        with patch("padboard.audio.transcode.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("padboard.audio.transcode.subprocess.run", side_effect=run):
            stream, fmt = decoder.decode(m4a_file)

        tmp = Path(run.calls[0][-1])
        assert tmp.exists()
        assert fmt.sample_rate == 44100
        assert stream.num_frames == 2205

        stream.close()
        assert not tmp.exists()

    def test_temp_file_removed_when_output_undecodable(self, m4a_file):
        calls = []

        def run(cmd, **kwargs):
            calls.append(cmd)
            Path(cmd[-1]).write_bytes(b"garbage")
            return Mock(returncode=0, stderr=b"")

        decoder = AudioDecoder()
        with patch("padboard.audio.transcode.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("padboard.audio.transcode.subprocess.run", side_effect=run):
            with pytest.raises(DecodeFailureError):
                decoder.decode(m4a_file)

        assert not Path(calls[0][-1]).exists()
