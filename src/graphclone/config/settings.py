"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for cloner selection.

Usage:
    from graphclone.config import CloneSettings

    # Load from environment variables (GRAPHCLONE_*)
    settings = CloneSettings()

    # Or override with explicit values
    settings = CloneSettings(strategy="compiled", prefer_default_constructor=False)
"""

from __future__ import annotations

import importlib
import pickle  # nosec B403 - protocol constants only
from enum import StrEnum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CloneStrategy(StrEnum):
    """Interchangeable cloning backends."""

    REFLECTIVE = "reflective"
    """Live introspection on every call. No warm-up, no per-type artifacts."""

    COMPILED = "compiled"
    """Per-type copy routines compiled on first use and cached."""

    ROUND_TRIP = "round_trip"
    """Serialize and deserialize the graph. Deep field clones only."""


def resolve_type(dotted_path: str) -> type:
    """Import a type from a dotted path such as ``"decimal.Decimal"``.

    Raises:
        ValueError: If the path cannot be imported or does not name a type.
    """
    module_name, _, attribute = dotted_path.rpartition(".")
    if not module_name:
        raise ValueError(f"'{dotted_path}' is not a dotted path to a type")
    try:
        module = importlib.import_module(module_name)
        resolved = getattr(module, attribute)
    except (ImportError, AttributeError) as exc:
        raise ValueError(f"Cannot import '{dotted_path}': {exc}") from exc
    if not isinstance(resolved, type):
        raise ValueError(f"'{dotted_path}' is not a type")
    return resolved


class CloneSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for clone factories.

    Attributes:
        strategy: Backend used by get_clone_factory() and create_clone_factory().
        prefer_default_constructor: Call `cls()` when it needs no arguments instead
            of allocating without running __init__.
        pickle_protocol: Pickle protocol for the round-trip backend.
        atomic_types: Dotted paths of extra types to treat as atomic.

    Environment Variables:
        GRAPHCLONE_STRATEGY
        GRAPHCLONE_PREFER_DEFAULT_CONSTRUCTOR
        GRAPHCLONE_PICKLE_PROTOCOL
        GRAPHCLONE_ATOMIC_TYPES (JSON list)
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAPHCLONE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strategy: CloneStrategy = CloneStrategy.REFLECTIVE
    prefer_default_constructor: bool = True
    pickle_protocol: int = Field(
        default=pickle.HIGHEST_PROTOCOL, ge=0, le=pickle.HIGHEST_PROTOCOL
    )
    atomic_types: list[str] = Field(default_factory=list)

    @field_validator("atomic_types")
    @classmethod
    def _check_importable(cls, value: list[str]) -> list[str]:
        for dotted_path in value:
            resolve_type(dotted_path)
        return value

    def resolve_atomic_types(self) -> list[type]:
        """Import every configured atomic type.

        Returns:
            The types named by `atomic_types`, in order.
        """
        return [resolve_type(dotted_path) for dotted_path in self.atomic_types]
