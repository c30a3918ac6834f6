"""Type introspection: classify a type and list its members.

The TypeIntrospector protocol is the only place that looks at type metadata.
Everything downstream works from the TypePlan it produces.

Usage:
    introspector = DefaultTypeIntrospector()
    plan = introspector.build_plan(MyClass, Basis.FIELD)
"""

from __future__ import annotations

import array
import collections
import datetime
import decimal
import fractions
import inspect
import io
import logging
import pathlib
import re
import socket
import threading
import types
import uuid
import weakref
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Protocol, runtime_checkable

from graphclone.core.mode import Basis
from graphclone.core.plan.models import (
    ContainerShape,
    MemberDescriptor,
    MemberStorage,
    PlanKind,
    TypePlan,
)

# Py_TPFLAGS_HEAPTYPE: set for classes created at runtime (class statements),
# clear for static C types.
_TPFLAGS_HEAPTYPE = 1 << 9

_DEFAULT_ATOMIC_TYPES: frozenset[type] = frozenset(
    {
        type(None),
        bool,
        int,
        float,
        complex,
        str,
        bytes,
        range,
        slice,
        type,
        Enum,
        type(NotImplemented),
        type(Ellipsis),
        types.FunctionType,
        types.BuiltinFunctionType,
        types.ModuleType,
        types.CodeType,
        property,
        weakref.ref,
        decimal.Decimal,
        fractions.Fraction,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        datetime.tzinfo,
        uuid.UUID,
        pathlib.PurePath,
        re.Pattern,
        # External resources: shared, never duplicated
        io.IOBase,
        socket.socket,
        threading.Thread,
        logging.Logger,
    }
)

# Order matters: bytearray and array before the generic checks, tuple before list.
_CONTAINER_SHAPES: tuple[tuple[type, ContainerShape], ...] = (
    (bytearray, ContainerShape.BYTEARRAY),
    (array.array, ContainerShape.TYPED_ARRAY),
    (tuple, ContainerShape.TUPLE),
    (list, ContainerShape.LIST),
    (dict, ContainerShape.MAPPING),
    (frozenset, ContainerShape.FROZENSET),
    (set, ContainerShape.SET),
    (collections.deque, ContainerShape.DEQUE),
)

_SKIPPED_SLOTS = frozenset({"__dict__", "__weakref__"})

# State that built-in base classes keep in their C struct rather than in slots or
# __dict__. Heap subclasses inherit it, so it is part of their field basis.
_NATIVE_FIELDS: dict[type, tuple[str, ...]] = {
    BaseException: ("args", "__traceback__", "__cause__", "__context__", "__suppress_context__"),
    OSError: ("errno", "strerror", "filename", "filename2"),
    StopIteration: ("value",),
}


@runtime_checkable
class TypeIntrospector(Protocol):
    """Capability that turns a runtime type into a TypePlan."""

    def build_plan(self, cls: type, basis: Basis) -> TypePlan:
        """Classify `cls` and collect its members for `basis`.

        Must be idempotent and free of side effects: concurrent callers may build
        the same plan redundantly.
        """
        ...


class DefaultTypeIntrospector:
    """Introspector based on Python's own class machinery.

    Args:
        extra_atomic_types: Types (and their subclasses) classified as atomic on top
            of the module-wide registry.
    """

    def __init__(self, extra_atomic_types: Iterable[type] = ()) -> None:
        self._extra_atomic_types = frozenset(extra_atomic_types)

    def build_plan(self, cls: type, basis: Basis) -> TypePlan:
        """Classify `cls` and collect its members for `basis`.

        Args:
            cls: Runtime type of the values to clone.
            basis: Field or property basis.

        Returns:
            Immutable plan for (cls, basis).
        """
        if self.is_atomic(cls):
            return TypePlan(cls=cls, basis=basis, kind=PlanKind.ATOMIC)

        shape = container_shape(cls)
        if shape is None and not cls.__flags__ & _TPFLAGS_HEAPTYPE:
            # Static C type we know nothing about: copy by reference
            return TypePlan(cls=cls, basis=basis, kind=PlanKind.ATOMIC)

        members = collect_members(cls, basis)
        has_instance_dict = basis is Basis.FIELD and getattr(cls, "__dictoffset__", 0) != 0
        if shape is not None:
            return TypePlan(
                cls=cls,
                basis=basis,
                kind=shape.kind,
                shape=shape,
                members=members,
                has_instance_dict=has_instance_dict,
            )
        return TypePlan(
            cls=cls,
            basis=basis,
            kind=PlanKind.COMPOSITE,
            members=members,
            has_instance_dict=has_instance_dict,
            has_default_constructor=accepts_no_arguments(cls),
            abstract=is_abstract(cls),
        )

    def is_atomic(self, cls: type) -> bool:
        """Check whether values of `cls` are returned as-is by every clone mode."""
        atomic = _atomic_types | self._extra_atomic_types
        return any(issubclass(cls, candidate) for candidate in atomic)


_atomic_types: set[type] = set(_DEFAULT_ATOMIC_TYPES)


def add_atomic_type(cls: type) -> None:
    """Add `cls` to the module-wide atomic registry.

    Prefer `graphclone.register_atomic_type`, which also invalidates cached plans.
    """
    if not isinstance(cls, type):
        raise TypeError(f"Expected a type, got {cls!r}")
    _atomic_types.add(cls)


def container_shape(cls: type) -> ContainerShape | None:
    """Return the built-in container family of `cls`, or None for non-containers."""
    for base, shape in _CONTAINER_SHAPES:
        if issubclass(cls, base):
            return shape
    return None


def collect_members(cls: type, basis: Basis) -> tuple[MemberDescriptor, ...]:
    """Collect the members of `cls` for `basis`, base classes first.

    Within a class members keep declaration order. Native state of built-in
    bases such as BaseException comes before any slot. A property redefined by
    a subclass keeps the position of its first definition but uses the override.
    """
    if basis is Basis.FIELD:
        return (*_iter_native_members(cls), *_iter_slot_members(cls))
    return tuple(_collect_property_members(cls))


def _iter_native_members(cls: type) -> Iterator[MemberDescriptor]:
    for owner in reversed(cls.__mro__):
        for name in _NATIVE_FIELDS.get(owner, ()):
            yield MemberDescriptor(
                name=name,
                owner=owner,
                storage=MemberStorage.NATIVE,
                accessor=vars(owner)[name],
            )


def _iter_slot_members(cls: type) -> Iterator[MemberDescriptor]:
    seen: set[str] = set()
    for owner in reversed(cls.__mro__):
        slots = vars(owner).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        annotations = _annotations_of(owner)
        for name in slots:
            if name in _SKIPPED_SLOTS:
                continue
            attr_name = _mangle(owner, name)
            if attr_name in seen:
                continue
            descriptor = vars(owner).get(attr_name)
            if not hasattr(descriptor, "__set__"):
                continue
            seen.add(attr_name)
            yield MemberDescriptor(
                name=attr_name,
                owner=owner,
                storage=MemberStorage.SLOT,
                accessor=descriptor,
                annotation=annotations.get(name),
            )


def _collect_property_members(cls: type) -> list[MemberDescriptor]:
    found: dict[str, MemberDescriptor] = {}
    for owner in reversed(cls.__mro__):
        for name, value in vars(owner).items():
            if isinstance(value, property):
                found[name] = MemberDescriptor(
                    name=name,
                    owner=owner,
                    storage=MemberStorage.PROPERTY,
                    accessor=value,
                    annotation=_annotations_of(value.fget).get("return"),
                )
            elif name in found:
                # Shadowed by a plain attribute in a subclass
                del found[name]
    return [member for member in found.values() if member.readable]


def _mangle(owner: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{owner.__name__.lstrip('_')}{name}"
    return name


def _annotations_of(obj: object) -> dict[str, object]:
    if obj is None:
        return {}
    try:
        return inspect.get_annotations(obj)  # type: ignore[arg-type]
    except TypeError:
        return {}


def accepts_no_arguments(cls: type) -> bool:
    """Check whether `cls()` is a valid call, i.e. every parameter is optional."""
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    return all(
        parameter.default is not inspect.Parameter.empty
        or parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for parameter in signature.parameters.values()
    )


def is_abstract(cls: type) -> bool:
    """Check whether `cls` is an ABC with abstract methods or a Protocol class."""
    return inspect.isabstract(cls) or bool(getattr(cls, "_is_protocol", False))
