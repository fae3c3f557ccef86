"""Enumerations for the soundboard."""

from enum import Enum


class PadState(str, Enum):
    """Lifecycle state of a single pad."""

    STOPPED = "stopped"  # No session; progress shows 0 (or 1 after natural completion)
    PLAYING = "playing"  # Session active and producing samples
    PAUSED = "paused"    # Session retained with its pause flag set
