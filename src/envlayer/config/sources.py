"""Readers that turn each configuration source into a flat layer mapping.

Each reader returns ``dict[str, Any]`` keyed by option name. None of them
merge or validate; that happens in :mod:`envlayer.config.resolver`.
"""

from __future__ import annotations

import io
import logging
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from dotenv.parser import parse_stream

from envlayer.errors import ConfigNotFound, ConfigParseError

logger = logging.getLogger(__name__)


def _read_text(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigParseError(path, exc.strerror or "cannot read file") from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(path, f"not valid UTF-8 ({exc.reason})") from exc


def load_toml_layer(path: Path, *, required: bool = True) -> dict[str, Any]:
    """Parse a structural TOML file into a layer.

    Raises:
        ConfigNotFound: *path* is absent and *required* is set.
        ConfigParseError: the file is not valid TOML.
    """
    if not path.is_file():
        if required:
            raise ConfigNotFound(path)
        logger.debug("Structural file absent", extra={"path": str(path)})
        return {}

    try:
        data = tomllib.loads(_read_text(path))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(path, str(exc)) from exc

    logger.debug("Loaded structural layer", extra={"path": str(path), "keys": len(data)})
    return data


def load_dotenv_layer(
    path: Path,
    options: Iterable[str],
    *,
    prefix: str = "",
) -> dict[str, str]:
    """Parse a dotenv secrets file into a layer.

    A missing file yields an empty layer. Keys are matched against *options*
    case-insensitively, with or without *prefix*; unrecognized keys are skipped.
    A bare ``KEY`` line without ``=`` leaves the key undefined.

    Raises:
        ConfigParseError: a line is not valid dotenv syntax.
    """
    if not path.is_file():
        logger.debug("Secrets file absent", extra={"path": str(path)})
        return {}

    lookup: dict[str, str] = {}
    for name in options:
        lookup[name.lower()] = name
        lookup[f"{prefix}{name}".lower()] = name
    layer: dict[str, str] = {}
    ignored: list[str] = []

    for binding in parse_stream(io.StringIO(_read_text(path))):
        if binding.error:
            raise ConfigParseError(
                path,
                "invalid statement",
                line=binding.original.line,
            )
        if binding.key is None or binding.value is None:
            continue
        name = lookup.get(binding.key.lower())
        if name is None:
            ignored.append(binding.key)
            continue
        layer[name] = binding.value

    logger.debug(
        "Loaded secrets layer",
        extra={"path": str(path), "keys": len(layer), "ignored": len(ignored)},
    )
    return layer


def environ_layer(
    environ: Mapping[str, str],
    options: Iterable[str],
    *,
    prefix: str = "",
) -> dict[str, str]:
    """Select the variables named ``<PREFIX><OPTION>`` (upper-cased) from *environ*."""
    layer: dict[str, str] = {}
    for name in options:
        var = f"{prefix}{name}".upper()
        if var in environ:
            layer[name] = environ[var]
    return layer
