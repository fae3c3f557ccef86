"""Persisted form of the pad list."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_serializer

from .color import Color

# Written only when set, so files without them keep their shape
_OPTIONAL_KEYS = ("customName", "name", "cuePosition", "cue")


class SavedPadRecord(BaseModel):
    """One pad as written to the saved-pads file.

    Field names on disk are camelCase (`filePath`, `customName`,
    `cuePosition`) for compatibility with existing `sounds.json` files.
    """

    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath", description="Absolute path of the clip")
    color: str | None = Field(default=None, description="Pad color as '#RRGGBB'")
    name: str | None = Field(default=None, alias="customName", description="Caption replacing the file stem")
    cue: float | None = Field(default=None, alias="cuePosition", ge=0, description="Cue point in seconds")

    @model_serializer(mode="wrap")
    def _drop_unset_optionals(self, handler) -> dict[str, Any]:
        data = handler(self)
        for key in _OPTIONAL_KEYS:
            if key in data and data[key] is None:
                del data[key]
        return data

    def to_color(self) -> Color:
        """Decoded color, white when absent or malformed."""
        return Color.from_hex(self.color)


class SavedBoard(RootModel[list[SavedPadRecord]]):
    """Ordered list of saved pads (the whole file payload)."""

    root: list[SavedPadRecord] = Field(default_factory=list)

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)
