"""Observer protocol definitions for pad events."""

from typing import Protocol, runtime_checkable

from .events import PadEvent


@runtime_checkable
class PadObserver(Protocol):
    """
    Observer that receives pad state changes and progress updates.

    This is the presentation layer's only window into the core: it
    renders whatever is pushed here and calls back into Soundboard for
    user actions.
    """

    def on_pad_event(self, event: PadEvent, pad_id: str) -> None:
        """
        Handle a pad state change.

        Note:
            May be called from a completion-waiter thread (FINISHED), so
            implementations should be thread-safe and avoid blocking.
        """
        ...

    def on_progress(
        self, pad_id: str, fraction: float, elapsed_label: str, total_label: str
    ) -> None:
        """
        Handle a progress update for a playing pad.

        Args:
            pad_id: Pad that is playing
            fraction: Progress in [0, 1]
            elapsed_label: Elapsed time, e.g. "0:01.200"
            total_label: Total duration, e.g. "0:03.000"

        Note:
            Called from the pad's progress reporter thread every tick.
            A slow observer delays only that pad's next tick.
        """
        ...
