"""Cloner selection: build clone factories from a strategy or from settings.

The choice between backends is made here, once, when a factory is created. The
walker and the compiled routines never branch on the backend.

Usage:
    cloner = create_clone_factory(CloneStrategy.COMPILED)
    copy = cloner.deep_field_clone(graph)

    # Process-wide factory configured from GRAPHCLONE_* environment variables
    copy = get_clone_factory().deep_field_clone(graph)
"""

from __future__ import annotations

import logging
import threading
from typing import TypeVar

from graphclone.cloners.compiled import CompiledCloner
from graphclone.cloners.protocol import CloneFactory
from graphclone.cloners.reflective import ReflectiveCloner
from graphclone.cloners.roundtrip import PickleSerializer, RoundTripCloner
from graphclone.config import CloneSettings, CloneStrategy
from graphclone.core.construction import Constructor
from graphclone.core.plan import TypePlanCache, get_plan_cache, register_atomic_type
from graphclone.core.types import Cloned

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_clone_factory(
    strategy: CloneStrategy | str | None = None,
    settings: CloneSettings | None = None,
    plans: TypePlanCache | None = None,
) -> CloneFactory:
    """Create a clone factory for a backend.

    Args:
        strategy: Backend to use. Defaults to `settings.strategy`.
        settings: Configuration (loaded from the environment when omitted).
        plans: Plan cache for the new factory (process-wide cache by default).

    Returns:
        A new cloner implementing the CloneFactory protocol.

    Raises:
        ValueError: If `strategy` names no known backend.
    """
    settings = settings or CloneSettings()
    selected = CloneStrategy(strategy) if strategy is not None else settings.strategy

    # Atomic registrations are process-wide, so they only go through the shared cache
    for atomic_type in settings.resolve_atomic_types():
        register_atomic_type(atomic_type)

    if plans is None:
        plans = get_plan_cache()
    constructor = Constructor(prefer_default_constructor=settings.prefer_default_constructor)
    logger.debug(f"Creating {selected.value} clone factory")

    if selected is CloneStrategy.COMPILED:
        return CompiledCloner(plans=plans, constructor=constructor)
    if selected is CloneStrategy.ROUND_TRIP:
        return RoundTripCloner(PickleSerializer(settings.pickle_protocol), plans=plans)
    return ReflectiveCloner(plans=plans, constructor=constructor)


_default_factory: CloneFactory | None = None
_default_factory_lock = threading.Lock()


def get_clone_factory() -> CloneFactory:
    """Access the process-wide clone factory, creating it from settings on first use.

    Returns:
        The shared CloneFactory instance.
    """
    global _default_factory
    factory = _default_factory
    if factory is None:
        with _default_factory_lock:
            if _default_factory is None:
                _default_factory = create_clone_factory()
            factory = _default_factory
    return factory


def reset_clone_factory() -> None:
    """Forget the process-wide factory so the next access re-reads settings."""
    global _default_factory
    with _default_factory_lock:
        _default_factory = None


def shallow_field_clone(value: T) -> Cloned[T]:
    """Shallow field-based clone using the process-wide factory."""
    return get_clone_factory().shallow_field_clone(value)


def shallow_property_clone(value: T) -> Cloned[T]:
    """Shallow property-based clone using the process-wide factory."""
    return get_clone_factory().shallow_property_clone(value)


def deep_field_clone(value: T) -> Cloned[T]:
    """Deep field-based clone using the process-wide factory."""
    return get_clone_factory().deep_field_clone(value)


def deep_property_clone(value: T) -> Cloned[T]:
    """Deep property-based clone using the process-wide factory."""
    return get_clone_factory().deep_property_clone(value)
