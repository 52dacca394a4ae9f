"""Command: print resolved settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envlayer.commands._base import EnvlayerCommand

if TYPE_CHECKING:
    from envlayer.commands._context import AppContext


@click.command(
    cls=EnvlayerCommand,
    examples="""\
  envlayer show
  envlayer -e prod show --sources
  APP_ENV=test envlayer --json show""",
)
@click.option("--sources", is_flag=True, help="Show which layer supplied each option.")
@click.pass_obj
def show(app: AppContext, sources: bool) -> None:
    """Resolve settings for the selected environment and print them, secrets masked."""
    app.emit(app.service.show(app.options.environment, sources=sources))
