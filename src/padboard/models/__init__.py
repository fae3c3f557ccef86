"""Data models for the soundboard."""

from .color import Color
from .config import AppConfig
from .enums import PadState
from .saved import SavedBoard, SavedPadRecord

__all__ = [
    "AppConfig",
    "Color",
    # Enums
    "PadState",
    # Persistence
    "SavedBoard",
    "SavedPadRecord",
]
