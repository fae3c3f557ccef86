"""Per-session progress reporting.

Each playing session gets its own reporter thread, cancellation token and
single-slot mailbox. Starting a new session cancels the previous reporter
first, so two reporters never race on the same pad.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """One-shot stop signal. Cancelling never blocks and may be repeated."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Sleep up to timeout seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)


class ProgressMailbox:
    """
    Single-slot holder for the latest progress value.

    put() never blocks and overwrites an unread value, so a slow consumer
    only ever sees the newest fraction.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[float] = None

    def put(self, value: float) -> None:
        with self._lock:
            self._value = value

    def take(self) -> Optional[float]:
        """Return the pending value (or None) and empty the slot."""
        with self._lock:
            value, self._value = self._value, None
            return value

    def peek(self) -> Optional[float]:
        with self._lock:
            return self._value


def clamp_fraction(value: float) -> float:
    """Clamp a progress value to [0, 1]."""
    return min(1.0, max(0.0, value))


class ProgressReporter:
    """
    Periodic progress loop for one playback session.

    Every `interval` seconds the reporter calls `sample()`; a float result
    is clamped to [0, 1], stored in the mailbox and passed to `publish`.
    `sample()` returning None skips the tick. The loop ends as soon as the
    token is cancelled.
    """

    def __init__(
        self,
        interval: float,
        sample: Callable[[], Optional[float]],
        publish: Optional[Callable[[float], None]] = None,
        token: Optional[CancellationToken] = None,
        name: str = "progress",
    ):
        """
        Args:
            interval: Seconds between ticks
            sample: Returns the current fraction, or None to skip the tick
            publish: Receives each clamped fraction
            token: Stop signal (a fresh one is created if omitted)
            name: Thread name, for logs
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self.interval = interval
        self.mailbox = ProgressMailbox()
        self.token = token or CancellationToken()
        self._sample = sample
        self._publish = publish
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        """Signal the loop to exit. Returns immediately."""
        self.token.cancel()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread.is_alive():
            self._thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def tick(self) -> Optional[float]:
        """Run one sample/publish step. Returns the published fraction, if any."""
        value = self._sample()
        if value is None or self.token.cancelled:
            return None

        fraction = clamp_fraction(value)
        self.mailbox.put(fraction)
        if self._publish is not None and not self.token.cancelled:
            self._publish(fraction)
        return fraction

    def _run(self) -> None:
        while not self.token.wait(self.interval):
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Error in progress reporter {self._thread.name}: {e}", exc_info=True)
