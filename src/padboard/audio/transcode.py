"""External-tool transcoding for containers libsndfile cannot read.

Clips such as .m4a are converted to a temporary 16-bit PCM WAV with
ffmpeg before decoding. The caller owns the returned temp file.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from padboard.exceptions import ExternalToolFailureError, MissingExternalToolError

logger = logging.getLogger(__name__)

# Keep the tail of ffmpeg's stderr; the banner at the top is noise.
_STDERR_TAIL = 800


def find_transcoder(tool: str, path: Path | None = None) -> str:
    """
    Resolve a transcoder executable on PATH.

    Args:
        tool: Executable name or absolute path (e.g. "ffmpeg")
        path: Clip that needs it, for the error message

    Returns:
        Absolute path of the executable

    Raises:
        MissingExternalToolError: If the tool cannot be found
    """
    resolved = shutil.which(tool)
    if resolved is None:
        raise MissingExternalToolError(tool, path)
    return resolved


def transcode_to_wav(source: Path, tool: str = "ffmpeg", sample_rate: int = 44100) -> Path:
    """
    Convert an audio file to a temporary PCM WAV file.

    Runs synchronously. On failure the temp file is removed before raising.

    Args:
        source: File to convert
        tool: Transcoder executable
        sample_rate: Output sample rate in Hz

    Returns:
        Path of the temporary WAV file (caller must delete it)

    Raises:
        MissingExternalToolError: If the tool is not installed
        ExternalToolFailureError: If the tool exits non-zero or cannot be launched
    """
    executable = find_transcoder(tool, source)

    fd, tmp_name = tempfile.mkstemp(prefix="padboard_", suffix=".wav")
    os.close(fd)
    tmp_path = Path(tmp_name)

    cmd = [
        executable,
        "-i", str(source),
        "-y",
        "-acodec", "pcm_s16le",
        "-ar", str(sample_rate),
        str(tmp_path),
    ]
    logger.debug(f"Transcoding {source} -> {tmp_path}")

    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            check=False,
        )
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ExternalToolFailureError(tool, source, returncode=-1, stderr=str(e)) from e

    if proc.returncode != 0:
        tmp_path.unlink(missing_ok=True)
        stderr = proc.stderr.decode("utf-8", errors="replace")[-_STDERR_TAIL:]
        raise ExternalToolFailureError(tool, source, returncode=proc.returncode, stderr=stderr)

    return tmp_path
