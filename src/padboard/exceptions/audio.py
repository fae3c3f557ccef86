"""Audio-related exceptions.

Decoding errors (raised by the decoder while opening a clip):
- AudioFileNotFoundError: The clip is not on disk
- UnsupportedFormatError: The extension is not one we can play
- DecodeFailureError: The file is corrupt or not what its extension claims
- MissingExternalToolError: A transcoder is needed but not installed
- ExternalToolFailureError: The transcoder ran and exited non-zero

Output errors:
- AudioDeviceError: Output stream could not be opened or fed
- AudioDeviceInUseError: Output device is held by another application
"""

import sys
from pathlib import Path

from .base import PadboardError


class AudioError(PadboardError):
    """A clip could not be opened for playback."""

    def __init__(self, user_message: str, path: Path | str | None = None, **kwargs):
        """
        Initialize audio error.

        Args:
            user_message: User-friendly error message
            path: The file that failed (if applicable)
        """
        super().__init__(user_message, **kwargs)
        self.path = path


class AudioFileNotFoundError(AudioError):
    """Audio file does not exist."""

    def __init__(self, path: Path | str):
        super().__init__(
            user_message=f"Audio file not found: {path}",
            path=path,
            recoverable=True,
            recovery_hint="Check that the file has not been moved or deleted.",
        )


class UnsupportedFormatError(AudioError):
    """File extension is not a playable audio format."""

    def __init__(self, path: Path | str, extension: str):
        super().__init__(
            user_message=f"Unsupported audio format '{extension or '(none)'}'",
            technical_message=f"Unsupported extension {extension!r} for {path}",
            path=path,
            recoverable=True,
            recovery_hint="Supported formats: .wav, .mp3, .m4a (needs ffmpeg), .ogg",
        )
        self.extension = extension


class DecodeFailureError(AudioError):
    """The audio data is malformed or cannot be decoded."""

    def __init__(self, path: Path | str, original_error: str | None = None):
        user_msg = f"Failed to decode audio file: {Path(path).name}"
        tech_msg = f"Decode failure for {path}"
        if original_error:
            tech_msg += f": {original_error}"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            path=path,
            recoverable=True,
            recovery_hint="The file may be corrupted or not a valid audio file.",
        )
        self.original_error = original_error


def _install_hint(tool: str) -> str:
    """Per-platform install instructions for an external tool."""
    if sys.platform == "darwin":
        how = f"brew install {tool}"
    elif sys.platform == "win32":
        how = f"download {tool} from https://ffmpeg.org/download.html and add it to PATH"
    else:
        how = f"sudo apt-get install {tool}"
    return f"Install {tool} ({how}), then restart the application."


class MissingExternalToolError(AudioError):
    """A transcoder executable is required but not on PATH."""

    def __init__(self, tool: str, path: Path | str | None = None):
        super().__init__(
            user_message=f"This format requires {tool}, which is not installed.",
            technical_message=f"{tool} not found in PATH (needed for {path})",
            path=path,
            recoverable=True,
            recovery_hint=_install_hint(tool),
        )
        self.tool = tool


class ExternalToolFailureError(AudioError):
    """The transcoder ran but exited with an error."""

    def __init__(
        self,
        tool: str,
        path: Path | str,
        returncode: int,
        stderr: str | None = None,
    ):
        tech_msg = f"{tool} exited with code {returncode} while converting {path}"
        if stderr:
            tech_msg += f"\n{stderr}"

        super().__init__(
            user_message=f"Failed to convert {Path(path).name} ({tool} error)",
            technical_message=tech_msg,
            path=path,
            recoverable=True,
            recovery_hint=f"Make sure {tool} is installed correctly and the file is not corrupted.",
        )
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr


class AudioDeviceError(PadboardError):
    """Audio device initialization or operation failed."""

    def __init__(self, user_message: str, device_id: int | None = None, **kwargs):
        """
        Initialize audio device error.

        Args:
            user_message: User-friendly error message
            device_id: The device ID that failed (if applicable)
        """
        super().__init__(user_message, **kwargs)
        self.device_id = device_id


class AudioDeviceInUseError(AudioDeviceError):
    """Audio device is already in use by another application."""

    def __init__(self, device_id: int | None = None, original_error: str | None = None):
        user_msg = "Audio device is already in use by another application."
        tech_msg = user_msg
        if original_error:
            tech_msg += f"\nOriginal error: {original_error}"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            device_id=device_id,
            recoverable=True,
            recovery_hint=(
                "Close other audio applications. "
                "Run 'padboard audio list' to see available devices."
            ),
        )
