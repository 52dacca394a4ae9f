"""Root CLI group for envlayer with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from envlayer import __version__
from envlayer.commands import register_commands
from envlayer.commands._context import AppContext, CliOptions


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="envlayer")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "-e",
    "--env",
    "environment",
    default=None,
    help="Environment to resolve (default: $APP_ENV, then 'dev').",
)
@click.option(
    "-d",
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding config.<env>.toml and .env.<env>.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    environment: str | None,
    config_dir: Path | None,
) -> None:
    """envlayer: layered per-environment configuration."""
    options = CliOptions(
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
        environment=environment,
        config_dir=config_dir,
    )
    ctx.obj = AppContext(options)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
