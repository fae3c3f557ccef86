"""Generic utility modules for padboard.

- observer: Thread-safe observer list
- persistence: Pydantic JSON load/save with backups and atomic writes
- timefmt: Elapsed/total time labels
"""

from .observer import ObserverManager
from .timefmt import format_time

__all__ = ["ObserverManager", "format_time"]
