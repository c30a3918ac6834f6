"""Process-wide cache of type plans.

Reads never lock. Inserts go through dict.setdefault, which is atomic under the
GIL: when two threads miss on the same key at once, both build a plan, exactly one
is published and the other is discarded. Building a plan has no side effects, so
the redundant work is harmless.
"""

from __future__ import annotations

import logging

from graphclone.core.mode import Basis
from graphclone.core.plan.introspection import (
    DefaultTypeIntrospector,
    TypeIntrospector,
    add_atomic_type,
)
from graphclone.core.plan.models import TypePlan

logger = logging.getLogger(__name__)


class TypePlanCache:
    """Maps (type, basis) to its immutable TypePlan, building plans on first use.

    Args:
        introspector: Capability used to build plans on cache misses.
    """

    def __init__(self, introspector: TypeIntrospector | None = None) -> None:
        self._introspector = introspector or DefaultTypeIntrospector()
        self._plans: dict[tuple[type, Basis], TypePlan] = {}

    @property
    def introspector(self) -> TypeIntrospector:
        return self._introspector

    def get_or_build(self, cls: type, basis: Basis) -> TypePlan:
        """Return the plan for (cls, basis), building and publishing it on a miss.

        Args:
            cls: Exact runtime type of the value being cloned.
            basis: Field or property basis.

        Returns:
            The published plan. Concurrent callers always get the same instance.
        """
        key = (cls, basis)
        plan = self._plans.get(key)
        if plan is not None:
            return plan
        built = self._introspector.build_plan(cls, basis)
        plan = self._plans.setdefault(key, built)
        if plan is built:
            logger.debug(
                f"Built {basis.name.lower()} plan for {cls.__qualname__}: "
                f"{plan.kind.name}, {len(plan.members)} member(s)"
            )
        return plan

    def invalidate(self, cls: type | None = None) -> int:
        """Drop cached plans.

        Args:
            cls: Drop plans of this type and its subclasses. None drops everything.

        Returns:
            Number of plans dropped.
        """
        if cls is None:
            dropped = len(self._plans)
            self._plans.clear()
            return dropped
        stale = [key for key in list(self._plans) if issubclass(key[0], cls)]
        for key in stale:
            self._plans.pop(key, None)
        return len(stale)

    def __len__(self) -> int:
        return len(self._plans)


# Module-level cache instance
_plan_cache = TypePlanCache()


def get_plan_cache() -> TypePlanCache:
    """Access the process-wide plan cache.

    Returns:
        The TypePlanCache shared by cloners created without an explicit cache.
    """
    return _plan_cache


def register_atomic_type(cls: type) -> type:
    """Classify `cls` and its subclasses as atomic: returned as-is by every clone.

    Usable as a class decorator. Cached plans of the process-wide cache are
    invalidated; cloners holding their own caches or compiled routines should be
    created after registration or cleared.

    Args:
        cls: Type to register.

    Returns:
        `cls`, unchanged.
    """
    add_atomic_type(cls)
    dropped = _plan_cache.invalidate(cls)
    logger.debug(f"Registered atomic type {cls.__qualname__} ({dropped} cached plan(s) dropped)")
    return cls
