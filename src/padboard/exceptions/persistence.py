"""Exceptions for the saved-pads store.

Neither is fatal: callers log them and carry on with an empty board
(read) or the previous file on disk (write).
"""

from .base import PadboardError


class PersistenceError(PadboardError):
    """Saved pad state could not be read or written."""

    def __init__(self, user_message: str, file_path: str | None = None, **kwargs):
        super().__init__(user_message, **kwargs)
        self.file_path = file_path


class PersistenceReadError(PersistenceError):
    """Saved pad file exists but its payload is corrupt."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            user_message="Saved pads could not be read; starting with an empty board.",
            technical_message=f"Corrupt saved state in {file_path}: {reason}",
            file_path=file_path,
            recoverable=True,
            recovery_hint=f"Fix or delete {file_path}. A backup may exist as {file_path}.bak",
        )
        self.reason = reason


class PersistenceWriteError(PersistenceError):
    """Saved pad file could not be written."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            user_message="Could not save pads.",
            technical_message=f"Failed to write {file_path}: {reason}",
            file_path=file_path,
            recoverable=True,
            recovery_hint="Check file permissions and disk space.",
        )
        self.reason = reason
