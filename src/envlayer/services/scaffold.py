"""Starter configuration files rendered from packaged Jinja2 templates."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader

from envlayer.config.discovery import structural_path

# Per-environment starter values; anything missing falls back to _BASE_PROFILE.
_BASE_PROFILE: dict[str, Any] = {
    "host": "localhost",
    "port": 8000,
    "debug": False,
    "log_level": "INFO",
    "database_url": None,
}
_PROFILES: dict[str, dict[str, Any]] = {
    "dev": {"debug": True, "log_level": "DEBUG", "database_url": "sqlite:///./dev.db"},
    "test": {"log_level": "WARNING", "database_url": "sqlite:///:memory:"},
    "staging": {"host": "0.0.0.0"},
    "prod": {"host": "0.0.0.0", "log_level": "WARNING"},
}

GITIGNORE_RULES = (".env.*", "!.env.example")

_TOML_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def toml_str(value: object) -> str:
    """Quote *value* as a TOML basic string."""
    out = []
    for char in str(value):
        if char in _TOML_ESCAPES:
            out.append(_TOML_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{ord(char):04X}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


def build_template_environment(*, override_dir: Path | None = None) -> Environment:
    """Build a Jinja2 environment with project overrides before packaged defaults.

    Overrides are read from ``<override_dir>/.envlayer/templates/``.
    """
    loaders: list[BaseLoader] = []
    if override_dir is not None:
        loaders.append(FileSystemLoader(str(override_dir / ".envlayer" / "templates")))
    loaders.append(PackageLoader("envlayer", "templates/init"))
    env = Environment(
        loader=ChoiceLoader(loaders),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["toml_str"] = toml_str
    return env


def profile_for(environment: str) -> dict[str, Any]:
    return {**_BASE_PROFILE, **_PROFILES.get(environment, {})}


def render_starter_files(
    target: Path,
    environments: Sequence[str],
    *,
    app_name: str,
) -> dict[Path, str]:
    """Render every starter file for *environments* without touching disk.

    Returns a mapping of destination path to file content. The
    ``.gitignore`` entry holds only the rules to append.
    """
    env = build_template_environment(override_dir=target)
    files: dict[Path, str] = {}

    config_template = env.get_template("config.toml.j2")
    for name in environments:
        files[structural_path(target, name)] = config_template.render(
            environment=name, app_name=app_name, **profile_for(name)
        )

    files[target / ".env.example"] = env.get_template("env.example.j2").render(
        environments=list(environments)
    )
    files[target / ".gitignore"] = env.get_template("gitignore.j2").render()
    return files


def missing_gitignore_rules(existing: str) -> list[str]:
    present = {line.strip() for line in existing.splitlines()}
    return [rule for rule in GITIGNORE_RULES if rule not in present]
