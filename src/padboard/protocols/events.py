"""Domain events for observer pattern."""

from enum import Enum


class PadEvent(Enum):
    """Events from pad lifecycle and playback."""

    ADDED = "added"                  # Pad created (interactive add or reload)
    REMOVED = "removed"              # Pad removed from the board
    PLAYING = "playing"              # Playback started (from the top or the cue point)
    PAUSED = "paused"                # Pause flag set, position captured
    RESUMED = "resumed"              # Playback continued from the paused position
    STOPPED = "stopped"              # Stopped by the user (progress reset to 0)
    FINISHED = "finished"            # Ran out of frames (progress pinned at 1)
    RESTARTED = "restarted"          # Reset to ready (no replay)
    COLOR_CHANGED = "color_changed"  # Decorative color updated
    RENAMED = "renamed"              # Custom caption set or cleared
    MOVED = "moved"                  # Position on the board changed
    SEEKED = "seeked"                # Playback position jumped
    CUE_CHANGED = "cue_changed"      # Cue point set or cleared
