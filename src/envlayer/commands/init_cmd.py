"""Command: write starter configuration files (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from envlayer.commands._base import EnvlayerCommand

if TYPE_CHECKING:
    from envlayer.commands._context import AppContext

_INIT_EXAMPLES = """\
  envlayer init
  envlayer init config --env dev --env prod
  envlayer init ./settings --name billing --force"""


@click.command("init", cls=EnvlayerCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=None)
@click.option(
    "--env",
    "environments",
    multiple=True,
    help="Environment to create a config file for (repeatable). Default: all known.",
)
@click.option("--name", default=None, help="Application name written to the config files.")
@click.option("--force", is_flag=True, help="Overwrite existing config files.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str | None,
    environments: tuple[str, ...],
    name: str | None,
    force: bool,
) -> None:
    """Create config.<env>.toml files, .env.example and secrets .gitignore rules."""
    target = Path(path) if path else app.options.config_dir or Path("config")
    envs = list(environments) or list(app.resolver.environments)
    app.emit(app.service.init(target, envs, app_name=name, force=force))
