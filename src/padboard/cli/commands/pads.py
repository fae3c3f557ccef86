"""Saved pad list commands."""

from pathlib import Path
from typing import Optional

import click

from padboard.audio import AudioDecoder
from padboard.cli.errors import exit_with_error
from padboard.core import verify_clip
from padboard.exceptions import PadboardError
from padboard.models import AppConfig, Color, SavedPadRecord
from padboard.storage import PadStore
from padboard.utils import format_time


@click.group(name="pads")
def pads_group():
    """Manage the saved pad list."""
    pass


def _load(store: PadStore) -> list[SavedPadRecord]:
    try:
        return store.load()
    except PadboardError as e:
        exit_with_error(e)


def _save(store: PadStore, records: list[SavedPadRecord]) -> None:
    try:
        store.save(records)
    except PadboardError as e:
        exit_with_error(e)


def _pick(records: list[SavedPadRecord], index: int) -> SavedPadRecord:
    if not 1 <= index <= len(records):
        raise click.BadParameter(f"no pad {index} (have {len(records)})", param_hint="INDEX")
    return records[index - 1]


@pads_group.command(name="list")
@click.pass_obj
def list_pads(config: AppConfig):
    """Show saved pads in board order."""
    store = PadStore(config.pads_file)
    records = _load(store)

    if not records:
        click.echo("No saved pads.")
        return

    for index, record in enumerate(records, start=1):
        path = Path(record.file_path)
        missing = "" if path.exists() else "  (missing)"
        cue = "" if record.cue is None else f"  cue {format_time(record.cue)}"
        label = record.name or path.stem
        click.echo(f"{index:>3}. {label}  {record.to_color().to_hex()}  {path}{cue}{missing}")


@pads_group.command(name="add")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--color", "-c", default=None, help="Pad color as #RRGGBB (default: white)")
@click.pass_obj
def add_pad(config: AppConfig, path: Path, color: Optional[str]):
    """Check that PATH decodes and append it to the saved pads."""
    store = PadStore(config.pads_file)
    try:
        info = verify_clip(path, AudioDecoder(transcoder=config.transcoder))
    except PadboardError as e:
        exit_with_error(e)

    records = _load(store)
    records.append(SavedPadRecord(file_path=str(path.absolute()), color=Color.from_hex(color).to_hex()))
    _save(store, records)

    click.echo(f"Added pad {len(records)}: {path.stem} ({format_time(info.duration)})")


@pads_group.command(name="rename")
@click.argument("index", type=int)
@click.argument("name", default="")
@click.pass_obj
def rename_pad(config: AppConfig, index: int, name: str):
    """Caption the pad at INDEX with NAME (omit NAME to use the file name)."""
    store = PadStore(config.pads_file)
    records = _load(store)
    record = _pick(records, index)

    records[index - 1] = record.model_copy(update={"name": name.strip() or None})
    _save(store, records)
    click.echo(f"Pad {index} is now {name.strip() or Path(record.file_path).stem}")


@pads_group.command(name="move")
@click.argument("index", type=int)
@click.argument("position", type=int)
@click.pass_obj
def move_pad(config: AppConfig, index: int, position: int):
    """Move the pad at INDEX to POSITION (clamped to the list)."""
    store = PadStore(config.pads_file)
    records = _load(store)
    record = _pick(records, index)

    target = min(max(position - 1, 0), len(records) - 1)
    records.insert(target, records.pop(index - 1))
    _save(store, records)
    click.echo(f"Moved {record.name or Path(record.file_path).stem} to {target + 1}")


@pads_group.command(name="remove")
@click.argument("index", type=int)
@click.pass_obj
def remove_pad(config: AppConfig, index: int):
    """Remove the pad at INDEX (as shown by 'pads list')."""
    store = PadStore(config.pads_file)
    records = _load(store)

    removed = _pick(records, index)
    records.pop(index - 1)
    _save(store, records)

    click.echo(f"Removed {Path(removed.file_path).stem}")
