"""Headless playback of a single clip."""

import time
from pathlib import Path
from typing import Optional

import click

from padboard.audio import AudioDecoder, init_output_device, shutdown_output_device
from padboard.cli.errors import exit_with_error
from padboard.core import PadPlayer, verify_clip
from padboard.exceptions import PadboardError
from padboard.models import AppConfig, PadState

BAR_WIDTH = 30


def _render_line(pad: PadPlayer, fraction: float) -> None:
    filled = int(fraction * BAR_WIDTH)
    snapshot = pad.snapshot()
    bar = "#" * filled + "-" * (BAR_WIDTH - filled)
    click.echo(f"\r{snapshot.label}  [{bar}]  {snapshot.elapsed_label} / {snapshot.total_label}", nl=False)


@click.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--device", "-d", type=int, default=None, help="Output device ID (default: from config)")
@click.pass_obj
def play(config: AppConfig, path: Path, device: Optional[int]):
    """Play PATH once with a live progress line. Ctrl+C stops."""
    decoder = AudioDecoder(transcoder=config.transcoder)

    try:
        info = verify_clip(path, decoder)
        output = init_output_device(
            sample_rate=config.sample_rate,
            buffer_size=config.buffer_size,
            num_channels=config.num_channels,
            device=device if device is not None else config.output_device,
        )
    except PadboardError as e:
        exit_with_error(e)

    click.echo(f"Playing {path.name} on {output.device_name} (Ctrl+C to stop)")
    pad = PadPlayer(
        pad_id="cli",
        path=path,
        info=info,
        device=output,
        decoder=decoder,
        progress_interval=config.progress_interval,
    )

    try:
        pad.play()
        while pad.state is not PadState.STOPPED:
            time.sleep(config.progress_interval)
            fraction = pad.latest_progress()
            if fraction is not None:
                _render_line(pad, fraction)
        _render_line(pad, pad.progress())
        click.echo()
    except KeyboardInterrupt:
        click.echo("\nStopped.")
    except PadboardError as e:
        exit_with_error(e)
    finally:
        pad.stop()
        shutdown_output_device()
