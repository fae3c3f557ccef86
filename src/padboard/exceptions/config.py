"""Errors raised while reading padboard's config.json."""

from typing import Any

from .base import PadboardError

_JSON_CHECKLIST = (
    "a comma after the last entry",
    "a key or string without double quotes",
    "a missing closing brace or bracket",
)


class ConfigurationError(PadboardError):
    """The application configuration could not be used."""


class ConfigFileInvalidError(ConfigurationError):
    """config.json is not valid JSON (or is empty)."""

    def __init__(self, file_path: str, parse_error: str):
        if "trailing comma" in parse_error.lower():
            summary = "The settings file ends an object or list with a comma"
            hint = f"Delete the comma before the closing bracket in {file_path}"
        else:
            summary = "The settings file is not valid JSON"
            checklist = "\n".join(f"  * {item}" for item in _JSON_CHECKLIST)
            hint = f"Open {file_path} and look for:\n{checklist}"

        super().__init__(
            user_message=summary,
            technical_message=f"Cannot parse {file_path}: {parse_error}",
            recoverable=True,
            recovery_hint=hint,
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """A setting parsed fine but holds a value padboard cannot use."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: str | None = None):
        hints = [f"Change '{field}' in the settings file"]
        if file_path:
            hints[0] += f" ({file_path})"

        name = field.lower()
        if "output_device" in name:
            hints.append("'padboard audio list' prints the device ids you can use")
        elif "transcoder" in name:
            hints.append("Point it at an ffmpeg executable, by name or by full path")

        super().__init__(
            user_message=f"Setting '{field}' is invalid: {error_msg}",
            technical_message=f"{field}={value!r} rejected: {error_msg}",
            recoverable=True,
            recovery_hint="\n".join(hints),
        )
        self.field = field
        self.value = value
        self.file_path = file_path
