"""Graph walker: the recursive cloning algorithm.

One GraphWalker serves exactly one clone operation. It owns the identity map for
that operation, so concurrent clone calls never share state beyond the plan cache.

Deep walks register every new clone in the identity map before any of its members
or elements are walked. A reference back to an object that is still being cloned
therefore resolves to the in-progress clone, which is what terminates cycles and
keeps shared references shared. Immutable containers are the one exception: they
can only be built from finished elements, so the identity map is consulted again
after their elements are cloned.

Bound methods are classified atomic, yet they reference their receiver through
`__self__`. Deep walks rebind them to the clone of that receiver; shallow walks
share them like any other nested reference.

Usage:
    walker = GraphWalker(CloneMode.DEEP_FIELD)
    clone = walker.walk(graph)
"""

from __future__ import annotations

import logging
import types
from contextlib import suppress
from typing import Any

from graphclone.core.construction import Constructor
from graphclone.core.errors import WriteError
from graphclone.core.identity import IdentityMap
from graphclone.core.mode import Basis, CloneMode
from graphclone.core.plan import ContainerShape, PlanKind, TypePlan, TypePlanCache, get_plan_cache

logger = logging.getLogger(__name__)


class GraphWalker:
    """Walks a source graph and produces its clone for one clone mode.

    Args:
        mode: Depth and basis of the clone.
        plans: Plan cache to classify types with (process-wide cache by default).
        constructor: Construction strategy for new instances.
    """

    def __init__(
        self,
        mode: CloneMode,
        plans: TypePlanCache | None = None,
        constructor: Constructor | None = None,
    ) -> None:
        self._mode = mode
        self._deep = mode.deep
        self._plans = plans if plans is not None else get_plan_cache()
        self._constructor = constructor or Constructor()
        self._identity = IdentityMap()

    @property
    def mode(self) -> CloneMode:
        return self._mode

    @property
    def identity(self) -> IdentityMap:
        return self._identity

    def walk(self, source: Any) -> Any:
        """Clone `source` according to the walker's mode.

        Args:
            source: Any value, including None.

        Returns:
            The clone; atomic values and None are returned unchanged.

        Raises:
            ConstructionError: If some object in the graph cannot be instantiated.
        """
        if source is None:
            return None
        if self._deep and type(source) is types.MethodType:
            return self._clone_method(source)
        plan = self._plans.get_or_build(type(source), self._mode.basis)
        if plan.kind is PlanKind.ATOMIC:
            return source
        if self._deep:
            existing = self._identity.get(source)
            if existing is not None:
                return existing

        if plan.kind is PlanKind.COMPOSITE:
            return self._clone_composite(source, plan)
        if plan.immutable:
            return self._clone_immutable(source, plan)
        return self._clone_container(source, plan)

    def transfer_state(self, source: Any, target: Any) -> None:
        """Copy the state of composite `source` into the existing `target`.

        Raises:
            TypeError: If `source` is not a composite or `target` is not an instance
                of the source's type.
        """
        plan = self._plans.get_or_build(type(source), self._mode.basis)
        if plan.kind is not PlanKind.COMPOSITE:
            raise TypeError(
                f"State can only be copied between composites, not {type(source).__qualname__}"
            )
        if not isinstance(target, plan.cls):
            raise TypeError(
                f"Cannot copy state of {plan.cls.__qualname__} into {type(target).__qualname__}"
            )
        if self._deep:
            self._identity.put(source, target)
        self._copy_members(source, target, plan)

    def _transfer(self, value: Any) -> Any:
        """Value to store in the clone: a recursive clone when deep, else as-is."""
        if self._deep:
            return self.walk(value)
        return value

    def _clone_method(self, source: types.MethodType) -> types.MethodType:
        existing = self._identity.get(source)
        if existing is not None:
            return existing  # type: ignore[no-any-return]
        receiver = self.walk(source.__self__)
        if receiver is source.__self__:
            return source
        # The receiver may have reached this method again while being cloned
        existing = self._identity.get(source)
        if existing is not None:
            return existing  # type: ignore[no-any-return]
        clone = types.MethodType(source.__func__, receiver)
        self._identity.put(source, clone)
        return clone

    def _clone_composite(self, source: Any, plan: TypePlan) -> Any:
        clone = self._constructor.construct(plan)
        if self._deep:
            self._identity.put(source, clone)
        self._copy_members(source, clone, plan)
        return clone

    def _clone_container(self, source: Any, plan: TypePlan) -> Any:
        clone = self._constructor.new_container(plan, source)
        if self._deep:
            self._identity.put(source, clone)

        shape = plan.shape
        if shape is not None and not shape.holds_references:
            clone.extend(source)
        elif shape is ContainerShape.MAPPING:
            for key, value in source.items():
                clone[self._transfer(key)] = self._transfer(value)
        elif shape is ContainerShape.SET:
            for item in source:
                clone.add(self._transfer(item))
        else:
            for item in source:
                clone.append(self._transfer(item))

        if plan.has_members:
            self._copy_members(source, clone, plan)
        return clone

    def _clone_immutable(self, source: Any, plan: TypePlan) -> Any:
        items = [self._transfer(item) for item in source]
        if self._deep:
            # A cycle through a mutable element may have cloned us already
            existing = self._identity.get(source)
            if existing is not None:
                return existing
        clone = self._constructor.build_immutable(plan, items)
        if self._deep:
            self._identity.put(source, clone)
        if plan.has_members:
            self._copy_members(source, clone, plan)
        return clone

    def _copy_members(self, source: Any, target: Any, plan: TypePlan) -> None:
        if plan.basis is Basis.FIELD:
            self._copy_fields(source, target, plan)
        else:
            self._copy_properties(source, target, plan)

    def _copy_fields(self, source: Any, target: Any, plan: TypePlan) -> None:
        for member in plan.members:
            try:
                value = member.read(source)
            except AttributeError:
                # Unset in the source: leave it unset in the clone too
                with suppress(AttributeError):
                    member.accessor.__delete__(target)
                continue
            member.write(target, self._transfer(value))

        if plan.has_instance_dict:
            source_dict = object.__getattribute__(source, "__dict__")
            target_dict = object.__getattribute__(target, "__dict__")
            target_dict.clear()
            for name, value in list(source_dict.items()):
                target_dict[name] = self._transfer(value)

    def _copy_properties(self, source: Any, target: Any, plan: TypePlan) -> None:
        for member in plan.members:
            try:
                if not member.writable:
                    raise WriteError(type(target), member.name)
                try:
                    value = member.read(source)
                except AttributeError:
                    continue
                member.write(target, self._transfer(value))
            except WriteError as exc:
                logger.debug(f"Skipped member during property-based clone: {exc}")
