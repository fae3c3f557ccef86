"""Root of the padboard exception tree.

Every error raised on purpose by padboard derives from PadboardError and
carries two renderings: a short sentence for the window or terminal, and
a detailed one for the log file. Errors that the user can fix also carry
a hint telling them how.
"""

from typing import Optional


class PadboardError(Exception):
    """
    Base exception for all padboard errors.

    Attributes:
        user_message: One-line description suitable for a dialog
        technical_message: Description written to the log
        recoverable: False only when the application cannot keep going
        recovery_hint: What the user can do about it, if anything
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message if technical_message else user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """The user message followed by the recovery hint, when there is one."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"


class PadNotFoundError(PadboardError):
    """No pad is registered under the given id."""

    def __init__(self, pad_id: str):
        super().__init__(
            user_message=f"Pad {pad_id} does not exist.",
            recoverable=True,
        )
        self.pad_id = pad_id
