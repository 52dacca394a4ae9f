"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy resolver construction and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import click
from pydantic import BaseModel

from envlayer.output.formatters import format_result

if TYPE_CHECKING:
    from envlayer.config.resolver import ConfigResolver
    from envlayer.services.config import ConfigService
    from envlayer.services.result import ServiceResult

DEFAULT_CONFIG_DIR = Path("config")


class CliOptions(BaseModel):
    """Global CLI flags, frozen after construction."""

    model_config = {"frozen": True}

    json_output: bool = False
    verbose: bool = False
    log_json: bool = False
    environment: str | None = None
    config_dir: Path | None = None


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The resolver is created lazily so ``--help`` and ``--version`` never
    touch the filesystem or take an environment snapshot.
    """

    def __init__(self, options: CliOptions) -> None:
        self.options = options
        self._resolver: ConfigResolver | None = None

        from envlayer.config.discovery import select_environment
        from envlayer.config.logging import configure_logging
        from envlayer.config.models import JSON_LOG_ENVIRONMENTS

        environment = options.environment or select_environment(os.environ)
        configure_logging(
            environment=environment,
            level=logging.DEBUG if options.verbose else logging.WARNING,
            log_json=options.log_json or environment in JSON_LOG_ENVIRONMENTS,
        )

    @property
    def config_dir(self) -> Path:
        """``--config-dir``, else ``ENVLAYER_CONFIG_DIR``, else walk-up discovery, else ./config."""
        if self.options.config_dir is not None:
            return self.options.config_dir

        from envlayer.config.discovery import find_config_dir

        return find_config_dir(environ=os.environ) or DEFAULT_CONFIG_DIR

    @property
    def resolver(self) -> ConfigResolver:
        if self._resolver is None:
            from envlayer.config.resolver import ConfigResolver

            self._resolver = ConfigResolver(self.config_dir)
        return self._resolver

    @property
    def service(self) -> ConfigService:
        from envlayer.services.config import ConfigService

        return ConfigService(self.resolver)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(result, json_output=self.options.json_output)
        if result.ok:
            click.echo(output)
            if not self.options.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
