"""Shared pytest fixtures and test helpers for envlayer tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from envlayer.config.discovery import CONFIG_DIR_ENV_VAR, ENVIRONMENT_VAR
from envlayer.config.models import Settings
from envlayer.config.resolver import ConfigResolver, option_names


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger and structlog state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("envlayer")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Temporary ``config/`` directory with a minimal dev structural file.

    This is the single source of truth for the project layout used by
    resolver, service and command tests.
    """
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "config.dev.toml").write_text('app_name = "shop"\nport = 9000\n', encoding="utf-8")
    return directory


@pytest.fixture
def resolver(config_dir: Path) -> ConfigResolver:
    """Resolver over *config_dir* with an empty environment snapshot."""
    return ConfigResolver(config_dir, environ={})


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp project and clear every variable the CLI would read.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes so the real process environment (CI often sets HOST or PORT)
    never leaks into resolution.
    """
    monkeypatch.chdir(tmp_path)
    for var in (ENVIRONMENT_VAR, CONFIG_DIR_ENV_VAR):
        monkeypatch.delenv(var, raising=False)
    for name in option_names(Settings):
        monkeypatch.delenv(name.upper(), raising=False)
