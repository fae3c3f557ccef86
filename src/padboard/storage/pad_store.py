"""Saved-pads file: the ordered list of (path, color) records."""

import logging
from pathlib import Path

from padboard.exceptions import PadboardError, PersistenceReadError, PersistenceWriteError
from padboard.models import SavedBoard, SavedPadRecord
from padboard.utils.persistence import read_model, write_model

logger = logging.getLogger(__name__)

PADS_FILENAME = "sounds.json"


class PadStore:
    """
    Loads and saves the pad list as a JSON array in a single file.

    A missing or empty file means "no saved pads". A corrupt file is
    reported as PersistenceReadError and is never overwritten by load().
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def in_directory(cls, storage_dir: Path) -> "PadStore":
        return cls(Path(storage_dir) / PADS_FILENAME)

    def load(self) -> list[SavedPadRecord]:
        """
        Read the saved records in order.

        Raises:
            PersistenceReadError: If the file exists but cannot be parsed
        """
        if not self.path.exists():
            logger.info(f"No saved pads at {self.path}")
            return []

        try:
            if not self.path.read_text(encoding="utf-8").strip():
                return []
            board = read_model(self.path, SavedBoard)
        except (PadboardError, OSError, UnicodeDecodeError) as e:
            raise PersistenceReadError(str(self.path), str(e)) from e

        records = list(board)
        logger.debug(f"Loaded {len(records)} saved pad(s) from {self.path}")
        return records

    def save(self, records: list[SavedPadRecord]) -> None:
        """
        Write the records, replacing the file atomically (previous copy kept as .bak).

        Raises:
            PersistenceWriteError: If the file cannot be written
        """
        board = SavedBoard(list(records))
        try:
            write_model(board, self.path, by_alias=True)
        except (PadboardError, OSError) as e:
            raise PersistenceWriteError(str(self.path), str(e)) from e

        logger.debug(f"Saved {len(records)} pad(s) to {self.path}")
