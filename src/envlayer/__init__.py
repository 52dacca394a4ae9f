"""envlayer: layered per-environment configuration and masked structured logging."""

from __future__ import annotations

__version__ = "0.3.0"
