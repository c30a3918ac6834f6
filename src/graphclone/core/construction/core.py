"""Construction strategy: obtain fresh instances to clone into.

Composites are created with their default constructor when every __init__
parameter is optional, and otherwise through `cls.__new__(cls)`, which skips
__init__ entirely. Skipping __init__ is safe because the member copy that follows
restores all reachable state. Containers always skip subclass initializers and are
rebuilt with the construction-time parameters of their source (deque maxlen,
defaultdict factory, array typecode).
"""

from __future__ import annotations

import collections
import logging
from collections.abc import Iterable
from typing import Any

from graphclone.core.errors import ConstructionError
from graphclone.core.plan import ContainerShape, PlanKind, TypePlan

logger = logging.getLogger(__name__)


class Constructor:
    """Materializes empty instances described by type plans.

    Args:
        prefer_default_constructor: Call `cls()` when it takes no required arguments.
            When False, composites are always created without running __init__.
    """

    def __init__(self, prefer_default_constructor: bool = True) -> None:
        self._prefer_default_constructor = prefer_default_constructor

    @property
    def prefer_default_constructor(self) -> bool:
        return self._prefer_default_constructor

    def construct(self, plan: TypePlan) -> Any:
        """Create a new, unpopulated instance of a composite type.

        Args:
            plan: Plan of the type to instantiate.

        Returns:
            New instance of exactly `plan.cls`.

        Raises:
            ConstructionError: If the type is abstract, its default constructor
                raised, or its __new__ demands arguments.
        """
        cls = plan.cls
        if plan.abstract:
            raise ConstructionError(cls, "abstract classes and protocols cannot be instantiated")
        if plan.has_default_constructor and self._prefer_default_constructor:
            try:
                return cls()
            except Exception as exc:
                raise ConstructionError(cls, f"default constructor raised {exc!r}") from exc
        logger.debug(f"Constructing {cls.__qualname__} without running __init__")
        return _allocate(cls)

    def new_container(self, plan: TypePlan, source: Any) -> Any:
        """Create an empty mutable container of the same concrete type as `source`.

        Args:
            plan: ARRAY or COLLECTION plan with a mutable shape.
            source: Container being cloned; supplies construction-time parameters.

        Returns:
            Empty container ready to receive elements.
        """
        cls = plan.cls
        shape = plan.shape
        if shape is None or shape.immutable:
            raise ValueError(f"{cls.__qualname__} is not a mutable container")
        if shape is ContainerShape.TYPED_ARRAY:
            return _allocate(cls, source.typecode)
        clone = _allocate(cls)
        if shape is ContainerShape.DEQUE and source.maxlen is not None:
            collections.deque.__init__(clone, (), source.maxlen)
        elif shape is ContainerShape.MAPPING and isinstance(source, collections.defaultdict):
            clone.default_factory = source.default_factory
        return clone

    def build_immutable(self, plan: TypePlan, items: Iterable[Any]) -> Any:
        """Create an immutable container (tuple or frozenset family) from its items.

        Subclasses such as namedtuples are rebuilt through the base type's __new__
        so their own signatures do not get in the way.
        """
        cls = plan.cls
        try:
            if plan.shape is ContainerShape.TUPLE:
                return tuple.__new__(cls, items)
            if plan.shape is ContainerShape.FROZENSET:
                return frozenset.__new__(cls, items)
        except TypeError as exc:
            raise ConstructionError(cls, str(exc)) from exc
        raise ValueError(f"{cls.__qualname__} is not an immutable container")


def _allocate(cls: type, *args: Any) -> Any:
    """Allocate an instance through __new__ without calling __init__."""
    try:
        instance = cls.__new__(cls, *args)
    except TypeError as exc:
        raise ConstructionError(cls, f"__new__ requires arguments ({exc})") from exc
    if not isinstance(instance, cls):
        raise ConstructionError(cls, f"__new__ returned {type(instance).__qualname__}")
    return instance


def construct(plan: TypePlan, prefer_default_constructor: bool = True) -> Any:
    """Create a new instance described by `plan` with a throwaway Constructor.

    Raises:
        ConstructionError: If no construction path can produce the instance.
    """
    if plan.kind is not PlanKind.COMPOSITE:
        raise ValueError(f"construct() expects a composite plan, got {plan.kind.name}")
    return Constructor(prefer_default_constructor).construct(plan)
