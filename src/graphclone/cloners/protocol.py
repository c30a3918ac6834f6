"""Clone factory protocol for swappable cloning backends.

The cloner layer abstracts how a graph is copied, enabling:
- Reflective cloning (live introspection, default)
- Compiled cloning (cached per-type routines)
- Round-trip cloning (serialize, then deserialize)

Usage:
    cloner: CloneFactory = ReflectiveCloner()
    copy = cloner.deep_field_clone(graph)
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

from graphclone.core.types import Cloned

T = TypeVar("T")


@runtime_checkable
class CloneFactory(Protocol):
    """Abstract cloning interface. Implementations decide how the copy is made.

    Every operation returns None for None and returns atomic values unchanged.
    Property-based operations run the getters and setters of the cloned types and
    omit state that no property exposes.
    """

    def shallow_field_clone(self, value: T) -> Cloned[T]:
        """Duplicate the root's stored state; nested references are shared."""
        ...

    def shallow_property_clone(self, value: T) -> Cloned[T]:
        """Duplicate the root's properties; nested references are shared."""
        ...

    def deep_field_clone(self, value: T) -> Cloned[T]:
        """Duplicate the whole reachable graph, stored state included."""
        ...

    def deep_property_clone(self, value: T) -> Cloned[T]:
        """Duplicate the whole reachable graph through properties."""
        ...


@runtime_checkable
class StateCopier(Protocol):
    """Transfers the state of one composite into another, existing instance."""

    def shallow_copy_state(self, original: Any, target: Any, property_based: bool = False) -> None:
        """Copy members of `original` into `target`, sharing nested references."""
        ...

    def deep_copy_state(self, original: Any, target: Any, property_based: bool = False) -> None:
        """Copy members of `original` into `target`, cloning nested references."""
        ...
