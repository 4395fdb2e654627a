"""CLI entry point for the migration retry tool."""

from __future__ import annotations

import click

from challenge_migrator.cli.commands import (
    export_errors,
    import_errors,
    list_failures,
    retry,
)


@click.group()
def cli() -> None:
    """Retry failed challenge and resource migrations."""


cli.add_command(retry)
cli.add_command(list_failures)
cli.add_command(import_errors)
cli.add_command(export_errors)
