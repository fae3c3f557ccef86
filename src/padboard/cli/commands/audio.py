"""`padboard audio` commands."""

import click

from padboard.audio import OutputDevice


@click.group(name="audio")
def audio_group():
    """Inspect audio outputs."""


def _echo_details(info: dict) -> None:
    click.echo(f"      {info['max_output_channels']} output channel(s)")
    click.echo(f"      Sample Rate: {info['default_samplerate']} Hz")
    latency = info.get("default_low_output_latency")
    if latency is not None:
        click.echo(f"      Low latency: {latency * 1000:.1f} ms")


@audio_group.command(name="list")
@click.option("--detailed", is_flag=True, help="Also print channels, rate and latency")
def list_audio(detailed: bool):
    """List output devices usable as output_device."""
    outputs = OutputDevice.list_output_devices()
    if not outputs:
        click.echo("No audio output devices found.")
        return

    default_id = OutputDevice.get_default_device()
    for device_id, name, host_api, info in outputs:
        marker = "  [Default]" if device_id == default_id else ""
        click.echo(f"[{device_id}] {name}{marker}  ({host_api})")
        if detailed:
            _echo_details(info)
