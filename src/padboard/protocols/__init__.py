"""Protocol definitions for pad events and observers."""

from .events import PadEvent
from .observers import PadObserver

__all__ = ["PadEvent", "PadObserver"]
