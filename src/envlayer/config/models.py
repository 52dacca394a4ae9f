"""Pydantic settings model with code-baked defaults.

Sparse contract: defaults live here, ``config.<env>.toml`` only carries
overrides. The one option with no default is ``database_url``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["auto", "console", "json"]

# Environments whose "auto" log format renders JSON.
JSON_LOG_ENVIRONMENTS = frozenset({"staging", "prod"})

REDACTED = "***"


class Settings(BaseModel):
    """Resolved application settings, frozen after construction."""

    model_config = {"frozen": True, "extra": "forbid"}

    environment: str = "dev"
    app_name: str = "app"
    host: str = "localhost"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False
    log_level: LogLevel = "INFO"
    log_format: LogFormat = "auto"

    database_url: SecretStr
    secret_key: SecretStr | None = None
    api_token: SecretStr | None = None

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("log_format", mode="before")
    @classmethod
    def _lower_format(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def use_json_logs(self) -> bool:
        if self.log_format == "auto":
            return self.environment in JSON_LOG_ENVIRONMENTS
        return self.log_format == "json"
