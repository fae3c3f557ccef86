"""padboard: a soundboard of pausable, resumable audio clips."""

__version__ = "0.1.0"

# Core
from .core import PadPlayer, Soundboard

__all__ = [
    "PadPlayer",
    "Soundboard",
]
