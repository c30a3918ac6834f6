"""Tests for type classification, member collection and the plan cache.

Critical Invariants:
- Immutable and external types are atomic
- Members are ordered base class first, declaration order within a class
- A (type, basis) pair has exactly one published plan, even under concurrency
"""

import array
import collections
import datetime
import decimal
import enum
import io
import threading
import uuid
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import NamedTuple, Protocol

import pytest

from graphclone.core.mode import Basis
from graphclone.core.plan import (
    ContainerShape,
    DefaultTypeIntrospector,
    MemberStorage,
    PlanKind,
    TypePlanCache,
    register_atomic_type,
)
from graphclone.core.plan.introspection import accepts_no_arguments, is_abstract


class Color(enum.Enum):
    RED = 1


class Pair(NamedTuple):
    left: object
    right: object


@dataclass
class Point:
    x: int = 0
    y: int = 0


class Base:
    __slots__ = ("a", "b")


class Derived(Base):
    __slots__ = ("c",)


class Hidden:
    __slots__ = ("__token", "public")


class Annotated:
    __slots__ = ("count",)
    count: int


class PropertyBase:
    @property
    def first(self):
        return 1

    @first.setter
    def first(self, value):
        pass

    @property
    def second(self):
        return 2


class PropertyDerived(PropertyBase):
    @property
    def third(self) -> int:
        return 3

    @property
    def first(self):
        return 10

    @first.setter
    def first(self, value):
        pass


class Shadowing(PropertyBase):
    second = 5


class WriteOnly:
    def _set(self, value):
        pass

    sink = property(None, _set)


class Shape(ABC):
    @abstractmethod
    def area(self): ...


class Drawable(Protocol):
    def draw(self) -> None: ...


class NeedsArgument:
    def __init__(self, value):
        self.value = value


# Classification


@pytest.mark.parametrize(
    "cls",
    [
        int,
        bool,
        float,
        str,
        bytes,
        type(None),
        decimal.Decimal,
        datetime.datetime,
        uuid.UUID,
        Color,
        io.StringIO,
        type(threading.Lock()),
        object,
    ],
)
def test_immutable_and_external_types_are_atomic(plans, cls):
    plan = plans.get_or_build(cls, Basis.FIELD)
    assert plan.kind is PlanKind.ATOMIC
    assert plan.atomic


@pytest.mark.parametrize(
    ("cls", "kind", "shape"),
    [
        (list, PlanKind.ARRAY, ContainerShape.LIST),
        (tuple, PlanKind.ARRAY, ContainerShape.TUPLE),
        (Pair, PlanKind.ARRAY, ContainerShape.TUPLE),
        (bytearray, PlanKind.ARRAY, ContainerShape.BYTEARRAY),
        (array.array, PlanKind.ARRAY, ContainerShape.TYPED_ARRAY),
        (dict, PlanKind.COLLECTION, ContainerShape.MAPPING),
        (collections.OrderedDict, PlanKind.COLLECTION, ContainerShape.MAPPING),
        (collections.defaultdict, PlanKind.COLLECTION, ContainerShape.MAPPING),
        (set, PlanKind.COLLECTION, ContainerShape.SET),
        (frozenset, PlanKind.COLLECTION, ContainerShape.FROZENSET),
        (collections.deque, PlanKind.COLLECTION, ContainerShape.DEQUE),
    ],
)
def test_containers_are_classified_by_shape(plans, cls, kind, shape):
    plan = plans.get_or_build(cls, Basis.FIELD)
    assert plan.kind is kind
    assert plan.shape is shape


def test_immutable_shapes():
    assert ContainerShape.TUPLE.immutable
    assert ContainerShape.FROZENSET.immutable
    assert not ContainerShape.LIST.immutable
    assert not ContainerShape.BYTEARRAY.holds_references


def test_user_classes_are_composite(plans):
    plan = plans.get_or_build(Point, Basis.FIELD)
    assert plan.kind is PlanKind.COMPOSITE
    assert plan.has_instance_dict
    assert plan.has_default_constructor
    assert not plan.abstract


def test_default_constructor_detection():
    assert accepts_no_arguments(Point)
    assert not accepts_no_arguments(NeedsArgument)


def test_abstract_detection():
    assert is_abstract(Shape)
    assert is_abstract(Drawable)
    assert not is_abstract(Point)


# Member collection


def test_slot_members_ordered_base_first(plans):
    """CRITICAL: Base class members come before subclass members."""
    plan = plans.get_or_build(Derived, Basis.FIELD)
    assert [member.name for member in plan.members] == ["a", "b", "c"]
    assert [member.owner for member in plan.members] == [Base, Base, Derived]
    assert all(member.storage is MemberStorage.SLOT for member in plan.members)
    assert not plan.has_instance_dict


def test_private_slots_are_name_mangled(plans):
    plan = plans.get_or_build(Hidden, Basis.FIELD)
    assert [member.name for member in plan.members] == ["_Hidden__token", "public"]


def test_slot_annotation_is_recorded(plans):
    plan = plans.get_or_build(Annotated, Basis.FIELD)
    assert plan.members[0].annotation is int


def test_property_override_keeps_first_position(plans):
    """An overridden property stays where the base declared it but uses the override."""
    plan = plans.get_or_build(PropertyDerived, Basis.PROPERTY)
    names = [member.name for member in plan.members]
    assert names == ["first", "second", "third"]
    assert plan.members[0].owner is PropertyDerived
    assert plan.members[2].annotation is int


def test_property_shadowed_by_plain_attribute_is_dropped(plans):
    plan = plans.get_or_build(Shadowing, Basis.PROPERTY)
    assert [member.name for member in plan.members] == ["first"]


def test_property_without_getter_is_excluded(plans):
    plan = plans.get_or_build(WriteOnly, Basis.PROPERTY)
    assert plan.members == ()


def test_property_basis_ignores_instance_dict(plans):
    plan = plans.get_or_build(Point, Basis.PROPERTY)
    assert plan.members == ()
    assert not plan.has_instance_dict


def test_read_only_property_is_readable_not_writable(plans):
    plan = plans.get_or_build(PropertyBase, Basis.PROPERTY)
    second = plan.members[1]
    assert second.readable
    assert not second.writable


# Plan cache


def test_cache_returns_same_plan_instance(plans):
    first = plans.get_or_build(Point, Basis.FIELD)
    second = plans.get_or_build(Point, Basis.FIELD)
    assert first is second
    assert len(plans) == 1


def test_basis_is_part_of_the_key(plans):
    field_plan = plans.get_or_build(Point, Basis.FIELD)
    property_plan = plans.get_or_build(Point, Basis.PROPERTY)
    assert field_plan is not property_plan
    assert len(plans) == 2


class _RacingIntrospector:
    """Blocks inside build_plan until both racing threads have missed the cache."""

    def __init__(self, parties: int) -> None:
        self._barrier = threading.Barrier(parties, timeout=5)
        self._inner = DefaultTypeIntrospector()
        self.builds = 0

    def build_plan(self, cls, basis):
        self.builds += 1
        self._barrier.wait()
        return self._inner.build_plan(cls, basis)


def test_concurrent_misses_publish_exactly_one_plan():
    """CRITICAL: Redundant builds are allowed, but everyone observes one plan.

    Why: Identity of plans (and routines) must not depend on thread timing.
    """
    introspector = _RacingIntrospector(parties=2)
    cache = TypePlanCache(introspector)

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [pool.submit(cache.get_or_build, Point, Basis.FIELD) for _ in range(2)]
        results = [future.result() for future in futures]

    assert introspector.builds == 2, "Both threads should have missed"
    assert results[0] is results[1], "INVARIANT: one published plan per key"
    assert cache.get_or_build(Point, Basis.FIELD) is results[0]
    assert len(cache) == 1


def test_invalidate_drops_type_and_subclasses(plans):
    plans.get_or_build(Base, Basis.FIELD)
    plans.get_or_build(Derived, Basis.FIELD)
    plans.get_or_build(Point, Basis.FIELD)

    assert plans.invalidate(Base) == 2
    assert len(plans) == 1
    assert plans.invalidate() == 1
    assert len(plans) == 0


def test_extra_atomic_types_on_introspector():
    cache = TypePlanCache(DefaultTypeIntrospector(extra_atomic_types=[Point]))
    assert cache.get_or_build(Point, Basis.FIELD).kind is PlanKind.ATOMIC


def test_register_atomic_type_as_decorator():
    @register_atomic_type
    class Handle:
        def __init__(self):
            self.fd = 3

    class SubHandle(Handle):
        pass

    cache = TypePlanCache()
    assert cache.get_or_build(Handle, Basis.FIELD).kind is PlanKind.ATOMIC
    assert cache.get_or_build(SubHandle, Basis.PROPERTY).kind is PlanKind.ATOMIC


def test_register_atomic_type_rejects_non_types():
    with pytest.raises(TypeError):
        register_atomic_type(42)  # type: ignore[arg-type]


class AppError(Exception):
    __slots__ = ("code",)


class StorageError(OSError):
    pass


def test_exception_native_state_is_part_of_field_basis(plans):
    """CRITICAL: State kept in the built-in exception struct is a field."""
    plan = plans.get_or_build(AppError, Basis.FIELD)
    names = [member.name for member in plan.members]
    assert names == [
        "args",
        "__traceback__",
        "__cause__",
        "__context__",
        "__suppress_context__",
        "code",
    ]
    assert plan.members[0].storage is MemberStorage.NATIVE
    assert plan.members[0].owner is BaseException


def test_os_error_native_state_follows_base_exception(plans):
    plan = plans.get_or_build(StorageError, Basis.FIELD)
    names = [member.name for member in plan.members]
    assert names[0] == "args"
    assert names[5:] == ["errno", "strerror", "filename", "filename2"]


def test_native_state_is_not_a_property(plans):
    assert plans.get_or_build(AppError, Basis.PROPERTY).members == ()


def test_native_member_read_and_write(plans):
    args_member = plans.get_or_build(AppError, Basis.FIELD).members[0]
    error = AppError("boom")
    target = AppError()
    args_member.write(target, args_member.read(error))
    assert target.args == ("boom",)
