"""Configuration layer: settings model, layered resolver, logging setup.

This layer depends on stdlib, pydantic, python-dotenv and structlog.
It must never import from services, commands, or output.
"""

from envlayer.config.models import Settings
from envlayer.config.resolver import ConfigResolver, Resolution, resolve_layers

__all__ = ["ConfigResolver", "Resolution", "Settings", "resolve_layers"]
