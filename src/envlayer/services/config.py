"""ConfigService: inspect, check and bootstrap layered configuration."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from envlayer.config.logging import mask_sensitive
from envlayer.config.resolver import ConfigResolver
from envlayer.errors import (
    ConfigError,
    ConfigNotFound,
    ConfigParseError,
    ConfigValidationError,
    UnknownEnvironment,
)
from envlayer.services.result import ServiceError, ServiceResult
from envlayer.services.scaffold import missing_gitignore_rules, render_starter_files

logger = logging.getLogger(__name__)


def error_detail(exc: ConfigError) -> dict[str, Any]:
    """Machine-readable fields identifying what failed."""
    if isinstance(exc, ConfigValidationError):
        return {"key": exc.key}
    if isinstance(exc, ConfigParseError):
        return {"path": str(exc.path), "line": exc.line}
    if isinstance(exc, ConfigNotFound):
        return {"path": str(exc.path)}
    if isinstance(exc, UnknownEnvironment):
        return {"environment": exc.environment, "known": list(exc.known)}
    return {}


def _project_name(target: Path) -> str:
    resolved = target.resolve()
    return resolved.parent.name if resolved.name == "config" else resolved.name


def error_result(op: str, exc: ConfigError) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=exc.code, message=str(exc), detail=error_detail(exc)),
    )


class ConfigService:
    """Operations over a :class:`ConfigResolver`.

    Resolution failures never escape as exceptions; they become failed
    results carrying the error code and the offending key or file.
    """

    def __init__(self, resolver: ConfigResolver) -> None:
        self._resolver = resolver

    def show(self, environment: str | None = None, *, sources: bool = False) -> ServiceResult:
        """Resolved settings with secrets masked, optionally with per-key origin."""
        try:
            resolution = self._resolver.explain(environment)
        except ConfigError as exc:
            return error_result("show", exc)

        settings = resolution.settings
        data: dict[str, Any] = {
            "environment": self._resolver.environment_name(environment),
            "settings": mask_sensitive(settings.model_dump()),
            "files": [str(p) for p in resolution.files],
        }
        if sources:
            data["sources"] = {
                name: resolution.origins.get(name, "resolver")
                for name in type(settings).model_fields
            }
        return ServiceResult(ok=True, op="show", data=data)

    def check(self, environments: Sequence[str] | None = None) -> ServiceResult:
        """Resolve each environment and report which ones fail.

        With no *environments*, checks the one selected by ``APP_ENV``.
        """
        if not environments:
            try:
                environments = [self._resolver.environment_name()]
            except UnknownEnvironment as exc:
                return error_result("check", exc)

        report: dict[str, dict[str, Any]] = {}
        failures = 0
        for name in environments:
            try:
                self._resolver.resolve(name)
            except ConfigError as exc:
                failures += 1
                report[name] = {
                    "ok": False,
                    "code": exc.code,
                    "message": str(exc),
                    **error_detail(exc),
                }
                logger.debug("Environment failed check", extra={"env": name, "code": exc.code})
            else:
                report[name] = {"ok": True}

        if failures:
            return ServiceResult(
                ok=False,
                op="check",
                error=ServiceError(
                    code="CHECK_FAILED",
                    message=f"{failures} of {len(report)} environment(s) failed",
                    detail={"environments": report},
                ),
            )
        return ServiceResult(
            ok=True,
            op="check",
            data={"count": len(report), "environments": report},
        )

    def init(
        self,
        target: Path,
        environments: Sequence[str],
        *,
        app_name: str | None = None,
        force: bool = False,
    ) -> ServiceResult:
        """Write starter config files into *target*; existing files are kept unless *force*."""
        known = self._resolver.environments
        for name in environments:
            if name not in known:
                return error_result("init", UnknownEnvironment(name, known))

        target.mkdir(parents=True, exist_ok=True)
        files = render_starter_files(
            target, environments, app_name=app_name or _project_name(target)
        )

        created: list[str] = []
        skipped: list[str] = []
        warnings: list[str] = []
        for path, content in files.items():
            if path.name == ".gitignore" and path.exists():
                existing = path.read_text(encoding="utf-8")
                missing = missing_gitignore_rules(existing)
                if not missing:
                    skipped.append(str(path))
                    continue
                prefix = "" if existing.endswith("\n") or not existing else "\n"
                path.write_text(existing + prefix + "\n".join(missing) + "\n", encoding="utf-8")
                created.append(str(path))
                continue
            if path.exists() and not force:
                skipped.append(str(path))
                warnings.append(f"{path.name} exists; use --force to overwrite")
                continue
            path.write_text(content, encoding="utf-8")
            created.append(str(path))

        logger.debug("Wrote starter files", extra={"created": len(created), "skipped": len(skipped)})
        return ServiceResult(
            ok=True,
            op="init",
            data={"target": str(target), "created": created, "skipped": skipped},
            warnings=warnings,
        )
