"""CLI command implementations."""

from .audio import audio_group
from .pads import pads_group
from .play import play

__all__ = ["audio_group", "pads_group", "play"]
