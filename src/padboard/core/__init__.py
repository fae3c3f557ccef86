"""Pad state machines, progress reporting and the soundboard registry."""

from .pad_player import PadPlayer, PadSnapshot
from .progress import CancellationToken, ProgressMailbox, ProgressReporter, clamp_fraction
from .soundboard import Soundboard, verify_clip

__all__ = [
    "CancellationToken",
    "PadPlayer",
    "PadSnapshot",
    "ProgressMailbox",
    "ProgressReporter",
    "Soundboard",
    "clamp_fraction",
    "verify_clip",
]
