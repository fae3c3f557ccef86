"""Error output shared by the CLI commands."""

import sys

import click

from padboard.exceptions import format_error_for_display


def exit_with_error(error: Exception) -> None:
    """Print an error the way users should see it and exit with status 1."""
    user_message, recovery_hint = format_error_for_display(error)
    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(recovery_hint, err=True)
    sys.exit(1)
