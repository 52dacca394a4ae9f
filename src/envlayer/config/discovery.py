"""Environment selection and config directory discovery.

Walk-up finder locates the directory holding ``config.<env>.toml`` files,
similar to how git finds .git/. ``ENVLAYER_CONFIG_DIR`` overrides the walk.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

DEFAULT_ENVIRONMENTS: tuple[str, ...] = ("dev", "test", "staging", "prod")
DEFAULT_ENVIRONMENT = "dev"

ENVIRONMENT_VAR = "APP_ENV"
CONFIG_DIR_ENV_VAR = "ENVLAYER_CONFIG_DIR"
CONFIG_SUBDIR = "config"


def structural_path(config_dir: Path, environment: str) -> Path:
    return config_dir / f"config.{environment}.toml"


def secrets_path(config_dir: Path, environment: str) -> Path:
    return config_dir / f".env.{environment}"


def select_environment(
    environ: Mapping[str, str],
    *,
    default: str = DEFAULT_ENVIRONMENT,
) -> str:
    """Return the environment named by ``APP_ENV``, or *default* when unset or blank."""
    value = environ.get(ENVIRONMENT_VAR, "").strip()
    return value or default


def _has_structural_files(directory: Path) -> bool:
    return directory.is_dir() and any(directory.glob("config.*.toml"))


def find_config_dir(
    start: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ``config.*.toml`` files.

    At each level ``<dir>/config/`` is checked before ``<dir>`` itself.
    Returns None if nothing is found. ``ENVLAYER_CONFIG_DIR`` wins when set,
    whether or not it exists; a missing directory surfaces later as
    ``ConfigNotFound``.
    """
    if environ is not None:
        override = environ.get(CONFIG_DIR_ENV_VAR)
        if override:
            return Path(override)

    current = (start or Path.cwd()).resolve()
    while True:
        for candidate in (current / CONFIG_SUBDIR, current):
            if _has_structural_files(candidate):
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None
