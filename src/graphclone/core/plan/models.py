"""Type plan models: how values of one type are cloned.

A TypePlan is computed once per (type, basis) and never mutated afterwards, so
any number of threads can read a published plan without locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from graphclone.core.errors import WriteError
from graphclone.core.mode import Basis


class PlanKind(Enum):
    """Closed set of cloning strategies a type can be classified into."""

    ATOMIC = auto()  # Immutable or external: returned as-is
    ARRAY = auto()  # Indexed container: list, tuple, bytearray, array.array
    COLLECTION = auto()  # Dynamically sized container: dict, set, frozenset, deque
    COMPOSITE = auto()  # Everything else: cloned member by member


class ContainerShape(Enum):
    """Built-in container family an ARRAY or COLLECTION plan was classified from."""

    LIST = auto()
    TUPLE = auto()
    BYTEARRAY = auto()
    TYPED_ARRAY = auto()
    MAPPING = auto()
    SET = auto()
    FROZENSET = auto()
    DEQUE = auto()

    @property
    def kind(self) -> PlanKind:
        if self in _COLLECTION_SHAPES:
            return PlanKind.COLLECTION
        return PlanKind.ARRAY

    @property
    def immutable(self) -> bool:
        """Immutable shapes can only be built once all their elements are cloned."""
        return self in (ContainerShape.TUPLE, ContainerShape.FROZENSET)

    @property
    def holds_references(self) -> bool:
        """False for byte buffers and typed arrays, whose elements are machine values."""
        return self not in (ContainerShape.BYTEARRAY, ContainerShape.TYPED_ARRAY)


_COLLECTION_SHAPES = frozenset(
    {
        ContainerShape.MAPPING,
        ContainerShape.SET,
        ContainerShape.FROZENSET,
        ContainerShape.DEQUE,
    }
)


class MemberStorage(Enum):
    """Where a member's state lives."""

    SLOT = auto()  # __slots__ entry, accessed through its member descriptor
    PROPERTY = auto()  # property object, accessed through getter/setter
    NATIVE = auto()  # C-level state of a built-in base (e.g. exception args)


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """One field or property of a composite type.

    Field-basis members are slots, or the native state of a built-in base class:
    reads and writes go straight to the descriptor, bypassing __setattr__ and
    properties. Property-basis members go through the normal attribute protocol
    so user getters and setters run.
    """

    name: str
    owner: type
    storage: MemberStorage
    accessor: Any
    """The slot member descriptor, the built-in getset descriptor or the property."""

    annotation: Any = None
    """Declared type of the member if its owner annotated it, else None."""

    @property
    def readable(self) -> bool:
        if self.storage is MemberStorage.PROPERTY:
            return self.accessor.fget is not None
        return True

    @property
    def writable(self) -> bool:
        if self.storage is MemberStorage.PROPERTY:
            return self.accessor.fset is not None
        return True

    def read(self, instance: Any) -> Any:
        """Read the member from `instance`.

        Raises:
            AttributeError: If the slot is unset or the getter found no backing state.
        """
        if self.storage is not MemberStorage.PROPERTY:
            return self.accessor.__get__(instance, self.owner)
        return getattr(instance, self.name)

    def write(self, instance: Any, value: Any) -> None:
        """Write `value` into the member of `instance`.

        Raises:
            WriteError: If the property has no setter or its setter refused the write.
        """
        if self.storage is not MemberStorage.PROPERTY:
            self.accessor.__set__(instance, value)
            return
        if not self.writable:
            raise WriteError(type(instance), self.name)
        try:
            setattr(instance, self.name, value)
        except WriteError:
            raise
        except AttributeError as exc:
            raise WriteError(type(instance), self.name) from exc


@dataclass(frozen=True, slots=True)
class TypePlan:
    """Cached description of how to clone instances of exactly one type."""

    cls: type
    basis: Basis
    kind: PlanKind
    shape: ContainerShape | None = None
    members: tuple[MemberDescriptor, ...] = ()
    has_instance_dict: bool = False
    """Instances carry a __dict__ whose entries are fields (field basis only)."""

    has_default_constructor: bool = False
    abstract: bool = False

    @property
    def atomic(self) -> bool:
        return self.kind is PlanKind.ATOMIC

    @property
    def immutable(self) -> bool:
        return self.shape is not None and self.shape.immutable

    @property
    def has_members(self) -> bool:
        return bool(self.members) or self.has_instance_dict
