"""Color model for pad decoration."""

import re

from pydantic import BaseModel, ConfigDict, Field

_HEX_RE = re.compile(r"^#([0-9A-Fa-f]{6})$")


class Color(BaseModel):
    """Standard 8-bit RGB color.

    Purely decorative: the color travels with the pad through persistence
    but has no effect on playback. Frozen so instances are hashable.
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255, description="Red (0-255)")
    g: int = Field(ge=0, le=255, description="Green (0-255)")
    b: int = Field(ge=0, le=255, description="Blue (0-255)")

    @classmethod
    def white(cls) -> "Color":
        """Default pad color."""
        return cls(r=255, g=255, b=255)

    @classmethod
    def from_hex(cls, value: str | None) -> "Color":
        """Parse a '#RRGGBB' string.

        Empty, missing or malformed values fall back to white rather
        than raising, since saved files may predate the color field.

        Example:
            >>> Color.from_hex("#FF8000")
            Color(r=255, g=128, b=0)
            >>> Color.from_hex("orange") == Color.white()
            True
        """
        if not value:
            return cls.white()
        match = _HEX_RE.match(value.strip())
        if match is None:
            return cls.white()
        digits = match.group(1)
        return cls(r=int(digits[0:2], 16), g=int(digits[2:4], 16), b=int(digits[4:6], 16))

    def to_rgb_tuple(self) -> tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        """Convert to CSS hex color string (e.g., '#FF0000')."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"
