"""structlog configuration with environment tagging and field masking.

Two output modes:
- Human (dev/test): colored console output to stderr
- JSON (staging/prod, or --log-json): structured JSON lines to stderr

Both structlog loggers and stdlib ``logging`` records pass through the same
processor chain, so ``extra={...}`` fields from library modules are tagged
and masked exactly like structlog key-value pairs.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import SecretStr
from structlog.types import EventDict, WrappedLogger

from envlayer.config.models import REDACTED

if TYPE_CHECKING:
    from envlayer.config.models import Settings

SENSITIVE_KEY_PATTERN = re.compile(
    r"password|passwd|secret|token|api[_-]?key|credential|authorization|private[_-]?key",
    re.IGNORECASE,
)

# Third-party loggers kept at WARNING regardless of the configured level.
QUIET_LOGGERS = ("asyncio", "urllib3", "markdown_it")


def _mask_value(value: Any, pattern: re.Pattern[str], marker: str) -> Any:
    if isinstance(value, SecretStr):
        return marker
    if isinstance(value, Mapping):
        return mask_sensitive(value, pattern=pattern, marker=marker)
    if isinstance(value, (list, tuple)):
        return [_mask_value(item, pattern, marker) for item in value]
    return value


def mask_sensitive(
    data: Mapping[str, Any],
    *,
    pattern: re.Pattern[str] = SENSITIVE_KEY_PATTERN,
    marker: str = REDACTED,
) -> dict[str, Any]:
    """Return a copy of *data* with sensitive values replaced by *marker*.

    A value is sensitive when its key matches *pattern* or when it is a
    ``SecretStr``. Nested mappings and lists are walked. Keys starting with
    ``_`` are structlog bookkeeping and pass through untouched.
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(key, str) and key.startswith("_"):
            result[key] = value
        elif isinstance(key, str) and pattern.search(key):
            result[key] = marker
        else:
            result[key] = _mask_value(value, pattern, marker)
    return result


class MaskSensitiveFields:
    """Processor that redacts sensitive fields from every event."""

    def __init__(
        self,
        pattern: re.Pattern[str] = SENSITIVE_KEY_PATTERN,
        marker: str = REDACTED,
    ) -> None:
        self.pattern = pattern
        self.marker = marker

    def __call__(self, _logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> EventDict:
        return mask_sensitive(event_dict, pattern=self.pattern, marker=self.marker)


class TagEnvironment:
    """Processor that stamps each event with the active environment."""

    def __init__(self, environment: str) -> None:
        self.environment = environment

    def __call__(self, _logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("env", self.environment)
        return event_dict


def configure_logging(
    *,
    environment: str = "dev",
    level: str | int = logging.INFO,
    log_json: bool = False,
    mask: bool = True,
) -> None:
    """Configure structlog processors and output routing.

    Safe to call more than once: the root handler is replaced, not stacked.
    That lets an application configure a bootstrap logger before settings
    exist and reconfigure with :func:`configure_from_settings` once they are
    resolved. The CLI only bootstraps: its format follows the selected
    environment and its level follows ``--verbose``.

    Args:
        environment: Value of the ``env`` field added to every event.
        level: Minimum level for the root and ``envlayer`` loggers.
        log_json: Use JSON renderer instead of console renderer.
        mask: Redact sensitive fields before rendering.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
        TagEnvironment(environment),
    ]
    if mask:
        shared_processors.append(MaskSensitiveFields())
    shared_processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    logging.getLogger("envlayer").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_from_settings(settings: Settings, *, log_json: bool | None = None) -> None:
    """Apply resolved settings; *log_json* overrides the environment's format."""
    configure_logging(
        environment=settings.environment,
        level=settings.log_level,
        log_json=settings.use_json_logs if log_json is None else log_json,
    )
