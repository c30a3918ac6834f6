"""Configuration module using Pydantic Settings.

Provides typed configuration for clone factories with environment variable support.

Usage:
    from graphclone.config import CloneSettings, CloneStrategy

    settings = CloneSettings(strategy=CloneStrategy.COMPILED)
"""

from graphclone.config.settings import CloneSettings, CloneStrategy, resolve_type

__all__ = [
    "CloneSettings",
    "CloneStrategy",
    "resolve_type",
]
