"""Persistence of the pad list."""

from .pad_store import PADS_FILENAME, PadStore

__all__ = ["PADS_FILENAME", "PadStore"]
