"""Command: validate one or every known environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envlayer.commands._base import EnvlayerCommand

if TYPE_CHECKING:
    from envlayer.commands._context import AppContext


@click.command(
    cls=EnvlayerCommand,
    examples="""\
  envlayer check
  envlayer -e prod check
  envlayer check --all
  envlayer --json check --all""",
)
@click.option("--all", "all_envs", is_flag=True, help="Check every known environment.")
@click.pass_obj
def check(app: AppContext, all_envs: bool) -> None:
    """Resolve configuration and report failures; exits 1 if any environment fails."""
    svc = app.service
    if all_envs:
        app.emit(svc.check(app.resolver.environments))
    elif app.options.environment is not None:
        app.emit(svc.check([app.options.environment]))
    else:
        app.emit(svc.check())
