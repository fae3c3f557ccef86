"""Observer fan-out used by pad players and the soundboard.

Observers are kept in an immutable tuple that is swapped on every change,
so notification walks a stable snapshot while other threads (or the
observers themselves) register and unregister.
"""

import logging
from threading import Lock
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=object)


class ObserverManager(Generic[T]):
    """
    Thread-safe list of observers of one protocol type.

    Callbacks always run outside the lock. A callback that raises is
    logged and skipped; the remaining observers still get the event.

    Usage:
        observers = ObserverManager[PadObserver](observer_type_name="pad")
        observers.register(presenter)
        observers.notify("on_pad_event", PadEvent.PLAYING, pad_id)
    """

    def __init__(self, lock: "Lock | None" = None, observer_type_name: str = "observer"):
        self._lock = lock if lock is not None else Lock()
        self._kind = observer_type_name
        self._snapshot: tuple[T, ...] = ()

    def register(self, observer: T) -> None:
        """Add an observer. Registering the same object twice is a no-op."""
        with self._lock:
            if observer in self._snapshot:
                logger.debug(f"Ignoring duplicate {self._kind} observer {observer!r}")
                return
            self._snapshot = self._snapshot + (observer,)
        logger.info(f"Added {self._kind} observer {observer!r}")

    def unregister(self, observer: T) -> None:
        with self._lock:
            remaining = tuple(o for o in self._snapshot if o is not observer)
            found = len(remaining) != len(self._snapshot)
            self._snapshot = remaining
        if found:
            logger.debug(f"Removed {self._kind} observer {observer!r}")
        else:
            logger.warning(f"{self._kind} observer {observer!r} was not registered")

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """Invoke ``callback_name`` on every observer registered right now."""
        targets = self._snapshot
        for target in targets:
            method = getattr(target, callback_name, None)
            if method is None:
                logger.error(f"{self._kind} observer {target!r} lacks {callback_name}()")
                continue
            try:
                method(*args, **kwargs)
            except Exception:
                logger.exception(f"{self._kind} observer {target!r} failed in {callback_name}()")

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._snapshot)
            self._snapshot = ()
        if dropped:
            logger.info(f"Dropped {dropped} {self._kind} observer(s)")

    def __contains__(self, observer: object) -> bool:
        return observer in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)
