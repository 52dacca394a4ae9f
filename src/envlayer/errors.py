"""Exception hierarchy for configuration resolution.

Every error is raised synchronously from ``resolve`` and is terminal for
that attempt. Callers abort startup; nothing here is retried.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class EnvlayerError(Exception):
    """Base exception for this project."""


class ConfigError(EnvlayerError):
    """Raised when configuration cannot be resolved."""

    code = "CONFIG_ERROR"


class UnknownEnvironment(ConfigError):
    """The environment discriminator is not one of the known names."""

    code = "UNKNOWN_ENVIRONMENT"

    def __init__(self, environment: str, known: Iterable[str]) -> None:
        self.environment = environment
        self.known = tuple(known)
        super().__init__(
            f"Unknown environment {environment!r} (expected one of: {', '.join(self.known)})"
        )


class ConfigNotFound(ConfigError):
    """A required structural file is absent."""

    code = "CONFIG_NOT_FOUND"

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Configuration file not found: {path}")


class ConfigParseError(ConfigError):
    """A configuration file exists but is not valid key-value data."""

    code = "CONFIG_PARSE_ERROR"

    def __init__(self, path: Path, detail: str, *, line: int | None = None) -> None:
        self.path = path
        self.line = line
        self.detail = detail
        where = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"Cannot parse {where}: {detail}")


class ConfigValidationError(ConfigError):
    """A required key is unset after merging, or a value failed coercion."""

    code = "CONFIG_VALIDATION_ERROR"

    def __init__(self, key: str, detail: str | None = None) -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"{key}: {detail}" if detail else key)
