"""Soundboard: the ordered registry of pads and the actions a UI invokes."""

import logging
import threading
import time
import uuid
from pathlib import Path
from typing import Callable, Iterator, Optional

from padboard.audio import SUPPORTED_EXTENSIONS, AudioDecoder, AudioInfo, OutputDevice
from padboard.exceptions import (
    AudioFileNotFoundError,
    PadNotFoundError,
    PersistenceError,
    UnsupportedFormatError,
    collect_errors,
)
from padboard.models import Color, PadState, SavedPadRecord
from padboard.protocols import PadEvent, PadObserver
from padboard.storage import PadStore
from padboard.utils import ObserverManager

from .pad_player import PadPlayer

logger = logging.getLogger(__name__)


def verify_clip(path: Path, decoder: AudioDecoder) -> AudioInfo:
    """
    Check that a file can become a pad and return its format and length.

    Raises:
        AudioFileNotFoundError: If the file does not exist
        UnsupportedFormatError: If the extension is not a known audio format
        AudioError: If probing the clip fails
    """
    if not path.exists():
        raise AudioFileNotFoundError(path)

    extension = path.suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(path, extension)

    return decoder.probe(path)


class Soundboard:
    """
    Owns every pad, keyed by a stable id, in insertion order.

    The presentation layer calls the actions below (add, toggle, seek,
    rename, move and the rest) and renders what arrives through
    PadObserver. After each change to the pad list the board is saved; a
    failed save is logged and never raised.

    Example:
        ```python
        board = Soundboard(device, store=PadStore.in_directory(config.storage_dir))
        board.register_observer(window)
        board.load_saved()
        pad = board.add(Path("airhorn.wav"), Color.from_hex("#FF0000"))
        board.toggle(pad.pad_id)
        ```
    """

    def __init__(
        self,
        device: OutputDevice,
        store: Optional[PadStore] = None,
        decoder: Optional[AudioDecoder] = None,
        progress_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            device: Shared output device every pad plays through
            store: Where the pad list is persisted (None disables saving)
            decoder: Decoder shared by all pads
            progress_interval: Seconds between progress updates
            clock: Time source handed to each pad
        """
        self._device = device
        self._store = store
        self._decoder = decoder or AudioDecoder()
        self._progress_interval = progress_interval
        self._clock = clock

        self._lock = threading.Lock()
        self._pads: dict[str, PadPlayer] = {}
        self._observers = ObserverManager[PadObserver](observer_type_name="pad")

    # =================================================================
    # Observers
    # =================================================================

    def register_observer(self, observer: PadObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: PadObserver) -> None:
        self._observers.unregister(observer)

    # =================================================================
    # Registry
    # =================================================================

    @property
    def pads(self) -> list[PadPlayer]:
        """Pads in the order they were added."""
        with self._lock:
            return list(self._pads.values())

    def get(self, pad_id: str) -> PadPlayer:
        """
        Raises:
            PadNotFoundError: If no pad has this id
        """
        with self._lock:
            pad = self._pads.get(pad_id)
        if pad is None:
            raise PadNotFoundError(pad_id)
        return pad

    def __len__(self) -> int:
        with self._lock:
            return len(self._pads)

    def __contains__(self, pad_id: str) -> bool:
        with self._lock:
            return pad_id in self._pads

    def __iter__(self) -> Iterator[PadPlayer]:
        return iter(self.pads)

    # =================================================================
    # Actions
    # =================================================================

    def add(self, path: Path | str, color: Optional[Color] = None) -> PadPlayer:
        """
        Add a clip as a new pad after checking that it decodes.

        Raises:
            AudioFileNotFoundError: If the file does not exist
            UnsupportedFormatError: If the extension is not a known audio format
            MissingExternalToolError: If the clip needs a transcoder that is not installed
            ExternalToolFailureError: If the transcoder rejects the clip
            DecodeFailureError: If the clip is corrupt
        """
        pad = self._create_pad(Path(path), color)
        self._insert(pad)
        logger.info(f"Added pad {pad.name} ({pad.total_duration:.3f}s)")
        self._observers.notify("on_pad_event", PadEvent.ADDED, pad.pad_id)
        self.save()
        return pad

    def toggle(self, pad_id: str) -> PadState:
        """Play, pause or resume a pad. Returns its new state."""
        return self.get(pad_id).toggle()

    def restart(self, pad_id: str) -> None:
        self.get(pad_id).restart()

    def stop(self, pad_id: str) -> bool:
        return self.get(pad_id).stop()

    def remove(self, pad_id: str) -> PadPlayer:
        """
        Stop a pad and take it off the board.

        Confirmation is the caller's business; this removes unconditionally.
        """
        with self._lock:
            pad = self._pads.pop(pad_id, None)
        if pad is None:
            raise PadNotFoundError(pad_id)

        pad.stop()
        logger.info(f"Removed pad {pad.name}")
        self._observers.notify("on_pad_event", PadEvent.REMOVED, pad_id)
        self.save()
        return pad

    def set_color(self, pad_id: str, color: Color | str) -> None:
        """Change a pad's color; strings are parsed as '#RRGGBB'."""
        if isinstance(color, str):
            color = Color.from_hex(color)
        pad = self.get(pad_id)
        pad.color = color
        self._observers.notify("on_pad_event", PadEvent.COLOR_CHANGED, pad_id)
        self.save()

    def rename(self, pad_id: str, name: Optional[str]) -> str:
        """Give a pad a caption; a blank name restores the file stem. Returns the shown name."""
        pad = self.get(pad_id)
        shown = pad.rename(name)
        self._observers.notify("on_pad_event", PadEvent.RENAMED, pad_id)
        self.save()
        return shown

    def move(self, pad_id: str, offset: int) -> int:
        """
        Shift a pad ``offset`` places in the board order (negative is up).

        The target index is clamped to the ends of the board.

        Returns:
            The pad's new index
        """
        with self._lock:
            order = list(self._pads)
            if pad_id not in self._pads:
                raise PadNotFoundError(pad_id)
            index = order.index(pad_id)
            target = min(max(index + offset, 0), len(order) - 1)
            if target != index:
                order.insert(target, order.pop(index))
                self._pads = {key: self._pads[key] for key in order}

        if target != index:
            logger.debug(f"Moved pad {pad_id[:8]} from {index} to {target}")
            self._observers.notify("on_pad_event", PadEvent.MOVED, pad_id)
            self.save()
        return target

    def seek(self, pad_id: str, fraction: float) -> bool:
        """Jump a playing or paused pad to ``fraction`` of its clip."""
        return self.get(pad_id).seek(fraction)

    def set_cue(self, pad_id: str) -> Optional[float]:
        """Mark the pad's current position as its cue point and save it."""
        cue = self.get(pad_id).set_cue()
        if cue is not None:
            self.save()
        return cue

    def clear_cue(self, pad_id: str) -> bool:
        cleared = self.get(pad_id).clear_cue()
        if cleared:
            self.save()
        return cleared

    def toggle_cue(self, pad_id: str) -> Optional[float]:
        """
        The cue button: clear an existing cue, otherwise set one at the
        current position.

        Returns:
            The new cue in seconds, or None if the cue was cleared or the
            pad is stopped
        """
        if self.get(pad_id).cue is not None:
            self.clear_cue(pad_id)
            return None
        return self.set_cue(pad_id)

    def play_from_cue(self, pad_id: str) -> bool:
        """Start the pad at its cue point. Returns False if it has none."""
        return self.get(pad_id).play_from_cue()

    def stop_all(self) -> int:
        """Stop every pad. Returns how many were playing or paused."""
        return sum(1 for pad in self.pads if pad.stop())

    # =================================================================
    # Persistence
    # =================================================================

    def load_saved(self) -> int:
        """
        Recreate pads from the store.

        Records whose file is gone, has an unknown extension, needs a missing
        transcoder or fails to decode are skipped without surfacing an error.
        A corrupt store is logged and treated as empty.

        Returns:
            Number of pads loaded
        """
        if self._store is None:
            return 0

        try:
            records = self._store.load()
        except PersistenceError as e:
            logger.error(e.technical_message)
            return 0

        collector = collect_errors("reload pads")
        loaded: list[PadPlayer] = []

        for record in records:
            with collector.try_operation(record.file_path):
                pad = self._create_pad(
                    Path(record.file_path), record.to_color(), name=record.name, cue=record.cue
                )
                self._insert(pad)
                loaded.append(pad)

        if collector.has_errors:
            logger.info(collector.get_summary())

        for pad in loaded:
            self._observers.notify("on_pad_event", PadEvent.ADDED, pad.pad_id)

        logger.info(f"Loaded {len(loaded)} of {len(records)} saved pad(s)")
        return len(loaded)

    def save(self) -> bool:
        """
        Snapshot the pad list to the store.

        Returns:
            False if the write failed (the failure is logged)
        """
        if self._store is None:
            return True

        records = [
            SavedPadRecord(
                file_path=str(pad.path),
                color=pad.color.to_hex(),
                name=pad.custom_name,
                cue=pad.cue,
            )
            for pad in self.pads
        ]
        try:
            self._store.save(records)
        except PersistenceError as e:
            logger.error(e.technical_message)
            return False
        return True

    def shutdown(self) -> None:
        """Stop all playback and drop observers."""
        stopped = self.stop_all()
        self._observers.clear()
        logger.info(f"Soundboard shut down ({stopped} pad(s) stopped)")

    # =================================================================
    # Internals
    # =================================================================

    def _create_pad(
        self,
        path: Path,
        color: Optional[Color],
        name: Optional[str] = None,
        cue: Optional[float] = None,
    ) -> PadPlayer:
        info = verify_clip(path, self._decoder)
        return PadPlayer(
            pad_id=uuid.uuid4().hex,
            path=path.absolute(),
            info=info,
            device=self._device,
            decoder=self._decoder,
            color=color,
            progress_interval=self._progress_interval,
            observers=self._observers,
            clock=self._clock,
            name=name,
            cue=cue,
        )

    def _insert(self, pad: PadPlayer) -> None:
        with self._lock:
            self._pads[pad.pad_id] = pad
