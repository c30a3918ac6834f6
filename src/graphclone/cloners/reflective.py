"""Reflective cloner: live introspection on every call.

No warm-up and no per-type artifacts besides the shared plan cache. Each call
builds a fresh GraphWalker, which reads and writes members through the attribute
protocol and descriptor lookups as it goes.

Usage:
    cloner = ReflectiveCloner()
    copy = cloner.deep_field_clone(graph)
"""

from __future__ import annotations

from typing import Any, TypeVar

from graphclone.core.construction import Constructor
from graphclone.core.mode import Basis, CloneMode, Depth
from graphclone.core.plan import TypePlanCache, get_plan_cache
from graphclone.core.types import Cloned
from graphclone.core.walker import GraphWalker

T = TypeVar("T")


class ReflectiveCloner:
    """Clone factory and state copier backed by the graph walker.

    Args:
        plans: Plan cache (process-wide cache by default).
        constructor: Construction strategy for new instances.
    """

    def __init__(
        self,
        plans: TypePlanCache | None = None,
        constructor: Constructor | None = None,
    ) -> None:
        self._plans = plans if plans is not None else get_plan_cache()
        self._constructor = constructor or Constructor()

    def clone(self, value: T, mode: CloneMode) -> Cloned[T]:
        """Clone `value` in the given mode.

        Args:
            value: Root of the graph to clone.
            mode: Depth and basis of the clone.

        Returns:
            The clone.

        Raises:
            ConstructionError: If an object in the graph cannot be instantiated.
        """
        return GraphWalker(mode, self._plans, self._constructor).walk(value)

    def shallow_field_clone(self, value: T) -> Cloned[T]:
        """Duplicate the root's stored state; nested references are shared."""
        return self.clone(value, CloneMode.SHALLOW_FIELD)

    def shallow_property_clone(self, value: T) -> Cloned[T]:
        """Duplicate the root's properties; nested references are shared."""
        return self.clone(value, CloneMode.SHALLOW_PROPERTY)

    def deep_field_clone(self, value: T) -> Cloned[T]:
        """Duplicate the whole reachable graph, stored state included."""
        return self.clone(value, CloneMode.DEEP_FIELD)

    def deep_property_clone(self, value: T) -> Cloned[T]:
        """Duplicate the whole reachable graph through properties."""
        return self.clone(value, CloneMode.DEEP_PROPERTY)

    def shallow_copy_state(self, original: Any, target: Any, property_based: bool = False) -> None:
        """Copy members of `original` into `target`, sharing nested references.

        Raises:
            TypeError: If `original` is not a composite or `target` has another type.
        """
        self._copy_state(original, target, Depth.SHALLOW, property_based)

    def deep_copy_state(self, original: Any, target: Any, property_based: bool = False) -> None:
        """Copy members of `original` into `target`, cloning nested references.

        References from the graph back to `original` resolve to `target`.

        Raises:
            TypeError: If `original` is not a composite or `target` has another type.
        """
        self._copy_state(original, target, Depth.DEEP, property_based)

    def _copy_state(self, original: Any, target: Any, depth: Depth, property_based: bool) -> None:
        mode = CloneMode(depth, Basis.PROPERTY if property_based else Basis.FIELD)
        GraphWalker(mode, self._plans, self._constructor).transfer_state(original, target)
