"""Layered configuration resolution.

Priority chain (highest to lowest):
  1. Process environment: ``<PREFIX><OPTION>`` variables
  2. Secrets file: ``.env.<env>``, optional, never committed
  3. Structural file: ``config.<env>.toml``, committed
  4. Code defaults: baked into the settings model

The merge itself is a pure function over explicit mappings
(:func:`resolve_layers`). :class:`ConfigResolver` is the thin I/O shell that
picks the file pair for an environment and takes one snapshot of the process
environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from envlayer.config.discovery import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_ENVIRONMENTS,
    secrets_path,
    select_environment,
    structural_path,
)
from envlayer.config.models import Settings
from envlayer.config.sources import environ_layer, load_dotenv_layer, load_toml_layer
from envlayer.errors import ConfigValidationError, UnknownEnvironment

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULTS = "defaults"
STRUCTURAL = "structural"
SECRETS = "secrets"
ENVIRONMENT = "environment"

# Set by the resolver from the discriminator; no layer may supply it.
RESERVED_KEY = "environment"


@dataclass(frozen=True)
class Layer:
    """One named source of key-value overrides."""

    name: str
    values: Mapping[str, Any]
    source: Path | None = None


@dataclass(frozen=True)
class Resolution(Generic[M]):
    """Resolved settings plus where each value came from."""

    settings: M
    origins: dict[str, str] = field(default_factory=dict)
    files: tuple[Path, ...] = ()


def option_names(model: type[BaseModel]) -> tuple[str, ...]:
    """Option keys a layer may define for *model*."""
    return tuple(name for name in model.model_fields if name != RESERVED_KEY)


def model_defaults(model: type[BaseModel]) -> dict[str, Any]:
    """The compiled-in defaults layer: every optional field's default value."""
    out: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        if name == RESERVED_KEY or info.is_required():
            continue
        out[name] = info.get_default(call_default_factory=True)
    return out


def merge_layers(layers: Sequence[Layer]) -> tuple[dict[str, Any], dict[str, str]]:
    """Merge *layers* in order; the last layer defining a key wins.

    Values are replaced whole. A layer that does not mention a key leaves the
    earlier value untouched. Returns the merged mapping and, for each key, the
    name of the layer that supplied it.
    """
    merged: dict[str, Any] = {}
    origins: dict[str, str] = {}
    for layer in layers:
        for key, value in layer.values.items():
            merged[key] = value
            origins[key] = layer.name
    return merged, origins


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def build_settings(
    model: type[M],
    merged: Mapping[str, Any],
    *,
    environment: str | None = None,
) -> M:
    """Validate *merged* into *model*.

    Raises:
        ConfigValidationError: a required option is unset or blank, a layer
            tried to set the reserved ``environment`` key, or a value cannot
            be coerced to its declared type. The first offending key is named.
    """
    if RESERVED_KEY in merged and RESERVED_KEY in model.model_fields:
        raise ConfigValidationError(RESERVED_KEY, "reserved; select it with APP_ENV instead")

    for name, info in model.model_fields.items():
        if name != RESERVED_KEY and info.is_required() and _is_blank(merged.get(name)):
            raise ConfigValidationError(name, "required option is not set")

    data = dict(merged)
    if environment is not None and RESERVED_KEY in model.model_fields:
        data[RESERVED_KEY] = environment

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        key = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise ConfigValidationError(key, first["msg"]) from exc


def resolve_layers(
    defaults: Mapping[str, Any],
    structural: Mapping[str, Any],
    secrets: Mapping[str, Any],
    environ: Mapping[str, str],
    *,
    model: type[M] = Settings,  # type: ignore[assignment]
    environment: str | None = None,
    env_prefix: str = "",
) -> M:
    """Resolve settings from four explicit layer mappings.

    *environ* is a snapshot of process environment variables; only the
    variables named after options of *model* are considered.
    """
    layers = (
        Layer(DEFAULTS, defaults),
        Layer(STRUCTURAL, structural),
        Layer(SECRETS, secrets),
        Layer(ENVIRONMENT, environ_layer(environ, option_names(model), prefix=env_prefix)),
    )
    merged, _origins = merge_layers(layers)
    return build_settings(model, merged, environment=environment)


class ConfigResolver(Generic[M]):
    """Resolve settings for a named environment from a config directory.

    Args:
        config_dir: Directory holding ``config.<env>.toml`` and ``.env.<env>``.
        model: Settings model class; required options are its fields
            without defaults.
        environments: Known environment names. Anything else is rejected
            before any file is touched.
        environ: Snapshot of the process environment. Copied from
            ``os.environ`` when omitted.
        env_prefix: Prefix for option environment variables.
        require_structural: Whether a missing structural file is an error.
    """

    def __init__(
        self,
        config_dir: Path | str,
        *,
        model: type[M] = Settings,  # type: ignore[assignment]
        environments: Collection[str] = DEFAULT_ENVIRONMENTS,
        environ: Mapping[str, str] | None = None,
        env_prefix: str = "",
        require_structural: bool = True,
        default_environment: str = DEFAULT_ENVIRONMENT,
    ) -> None:
        self.config_dir = Path(config_dir)
        self.model = model
        self.environments = tuple(environments)
        self.environ: dict[str, str] = dict(os.environ if environ is None else environ)
        self.env_prefix = env_prefix
        self.require_structural = require_structural
        self.default_environment = default_environment

    def environment_name(self, name: str | None = None) -> str:
        """Return *name*, or the ``APP_ENV`` selection, after checking it is known."""
        if name is None:
            name = select_environment(self.environ, default=self.default_environment)
        if name not in self.environments:
            raise UnknownEnvironment(name, self.environments)
        return name

    def layers(self, environment_name: str | None = None) -> tuple[Layer, ...]:
        """Load the four layers for an environment, in priority order."""
        env = self.environment_name(environment_name)
        options = option_names(self.model)
        toml_path = structural_path(self.config_dir, env)
        dotenv_path = secrets_path(self.config_dir, env)
        return (
            Layer(DEFAULTS, model_defaults(self.model)),
            Layer(
                STRUCTURAL,
                load_toml_layer(toml_path, required=self.require_structural),
                toml_path,
            ),
            Layer(
                SECRETS,
                load_dotenv_layer(dotenv_path, options, prefix=self.env_prefix),
                dotenv_path,
            ),
            Layer(ENVIRONMENT, environ_layer(self.environ, options, prefix=self.env_prefix)),
        )

    def explain(self, environment_name: str | None = None) -> Resolution[M]:
        """Resolve and report which layer supplied every option."""
        env = self.environment_name(environment_name)
        layers = self.layers(env)
        merged, origins = merge_layers(layers)
        settings = build_settings(self.model, merged, environment=env)
        files = tuple(
            layer.source for layer in layers if layer.source is not None and layer.source.is_file()
        )
        logger.debug(
            "Resolved settings",
            extra={"env": env, "files": [str(p) for p in files], "options": len(merged)},
        )
        return Resolution(settings=settings, origins=origins, files=files)

    def resolve(self, environment_name: str | None = None) -> M:
        """Produce validated settings for *environment_name* (or ``APP_ENV``)."""
        return self.explain(environment_name).settings
