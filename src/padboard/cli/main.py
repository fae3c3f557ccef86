"""Main CLI entry point."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import click

from padboard import __version__

from .commands import audio_group, pads_group, play
from .errors import exit_with_error

logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_dir: Optional[Path] = None) -> Path:
    """
    Attach a rotating file handler to the root logger.

    ``-v`` logs INFO, ``-vv`` or ``--debug`` logs DEBUG, otherwise only
    warnings are kept. ``--debug`` without ``--log-file`` writes to
    ./padboard-debug.log instead of the storage log directory.

    Returns:
        Path of the log file in use
    """
    level = logging.DEBUG if debug else (logging.WARNING, logging.INFO, logging.DEBUG)[min(verbose, 2)]

    if log_file is not None:
        log_path = log_file
    elif debug:
        log_path = Path.cwd() / "padboard-debug.log"
    else:
        directory = log_dir if log_dir is not None else Path.home() / ".padboard" / "logs"
        directory.mkdir(parents=True, exist_ok=True)
        log_path = directory / "padboard.log"

    handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    logger.info(f"Logging at {logging.getLevelName(level)} to {log_path}")
    return log_path


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="padboard")
@click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Settings file to use instead of ~/.padboard/config.json'
)
@click.option(
    '--storage-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Where sounds.json and logs/ live (overrides storage_dir)'
)
@click.option('-v', '--verbose', count=True, help='Log more (-v info, -vv debug)')
@click.option('--debug', is_flag=True, help='Log everything to ./padboard-debug.log')
@click.option('--log-file', type=click.Path(path_type=Path), default=None, help='Write the log here instead')
def cli(
    ctx,
    config_path: Optional[Path],
    storage_dir: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
):
    """
    padboard - a soundboard of audio clips.

    \b
    Examples:
      # Play one clip with a progress line (Ctrl+C stops)
      padboard play airhorn.wav

      # Manage the saved pad list
      padboard pads add intro.mp3 --color "#FF8000"
      padboard pads list
      padboard pads remove 1

      # List audio output devices
      padboard audio list
    """
    from padboard.exceptions import PadboardError
    from padboard.models import AppConfig

    try:
        config = AppConfig.load_or_default(config_path)
        if storage_dir is not None:
            config = config.model_copy(update={"storage_dir": storage_dir})
            config.ensure_directories()
    except PadboardError as e:
        exit_with_error(e)

    setup_logging(verbose, debug, log_file, config.log_dir)
    ctx.obj = config


cli.add_command(play)
cli.add_command(pads_group)
cli.add_command(audio_group)

if __name__ == "__main__":
    cli()
