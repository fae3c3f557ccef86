"""Helpers that turn library failures into padboard errors.

Low-level code (soundfile, sounddevice, subprocess, pydantic, file I/O)
raises whatever it raises. These helpers sit at the boundary where that
code is called and translate the failure into a PadboardError with a
message the user can act on:

* ``wrap_audio_device_error`` for PortAudio failures when opening a stream
* ``wrap_pydantic_error`` for config.json that fails to parse or validate
* ``ErrorContext`` to log a failed step once, with its name
* ``collect_errors`` to keep going through a batch (reloading saved pads)
  and report what failed at the end
* ``format_error_for_display`` for the CLI
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from .audio import AudioDeviceError, AudioDeviceInUseError
from .base import PadboardError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError

logger = logging.getLogger(__name__)

# PortAudio codes for "device unavailable" and "invalid device"
_DEVICE_BUSY_CODES = ("PaErrorCode -9996", "PaErrorCode -9985")


def _describe(error: BaseException) -> str:
    if isinstance(error, PadboardError):
        return error.technical_message
    return str(error)


class ErrorContext:
    """
    Log a named step if it fails, then re-raise (or swallow) the error.

        with ErrorContext("start output device", logger):
            stream.start()
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
        re_raise: bool = True
    ):
        self.operation = operation
        self.logger = logger_instance if logger_instance is not None else logger
        self.re_raise = re_raise
        self.error: Optional[BaseException] = None

    def __enter__(self) -> "ErrorContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            return False
        self.error = exc_val
        # Tracebacks only for non-padboard exceptions
        self.logger.error(
            f"Failed to {self.operation}: {_describe(exc_val)}",
            exc_info=not isinstance(exc_val, PadboardError),
        )
        return not self.re_raise


def wrap_pydantic_error(error: Exception, file_path: str) -> ConfigurationError:
    """Map a pydantic failure while loading ``file_path`` to a config error."""
    from pydantic import ValidationError

    text = str(error)
    if "json_invalid" in text or "Invalid JSON" in text:
        detail = text.partition("Invalid JSON:")[2] or text
        return ConfigFileInvalidError(file_path, detail.split("[type=")[0].strip())

    problems = error.errors() if isinstance(error, ValidationError) else []
    if not problems:
        return ConfigValidationError(field="unknown", value=None, error_msg=text, file_path=file_path)

    def location(problem: dict) -> str:
        return ".".join(str(part) for part in problem.get("loc", ())) or "unknown"

    if len(problems) == 1:
        only = problems[0]
        return ConfigValidationError(
            field=location(only),
            value=only.get("input"),
            error_msg=only.get("msg", "invalid value"),
            file_path=file_path,
        )

    listing = "\n".join(f"  * {location(p)}: {p.get('msg', 'invalid value')}" for p in problems)
    return ConfigValidationError(
        field="multiple fields",
        value=None,
        error_msg=f"{len(problems)} settings are invalid:\n{listing}",
        file_path=file_path,
    )


def wrap_audio_device_error(error: Exception, device_id: Optional[int] = None) -> AudioDeviceError:
    """Map a sounddevice/PortAudio exception to an AudioDeviceError."""
    text = str(error)
    if any(code in text for code in _DEVICE_BUSY_CODES):
        return AudioDeviceInUseError(device_id=device_id, original_error=text)

    target = "default output" if device_id is None else f"device {device_id}"
    return AudioDeviceError(
        user_message=f"Could not open the audio output: {text}",
        technical_message=f"PortAudio failure on {target}: {text}",
        device_id=device_id,
        recovery_hint="Pick another output with 'padboard audio list' and the output_device setting.",
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """Return ``(message, hint)`` for showing ``error`` to the user."""
    if isinstance(error, PadboardError):
        return error.user_message, error.recovery_hint
    return f"{type(error).__name__}: {error}", None


class ErrorCollector:
    """
    Records failures across a batch so one bad item doesn't stop the rest.

    Only ``Exception`` subclasses are recorded; KeyboardInterrupt and
    SystemExit propagate out of ``try_operation``.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @contextmanager
    def try_operation(self, item: str) -> Iterator[None]:
        try:
            yield
        except Exception as e:
            self.errors.append((item, e))
        else:
            self.success_count += 1

    def get_summary(self) -> str:
        total = self.error_count + self.success_count
        if not self.errors:
            return f"{self.operation}: all {total} succeeded"
        lines = [f"{self.operation}: {self.error_count} of {total} failed"]
        for item, error in self.errors:
            message = error.user_message if isinstance(error, PadboardError) else str(error)
            lines.append(f"  * {item}: {message}")
        return "\n".join(lines)


def collect_errors(operation: str) -> ErrorCollector:
    """
    Start collecting errors for a batch named ``operation``.

        collector = collect_errors("reload pads")
        for record in records:
            with collector.try_operation(record.file_path):
                ...
        if collector.has_errors:
            logger.info(collector.get_summary())
    """
    return ErrorCollector(operation)
