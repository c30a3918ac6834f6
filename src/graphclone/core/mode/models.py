"""Clone mode models.

Usage:
    mode = CloneMode(Depth.DEEP, Basis.FIELD)
    assert mode == CloneMode.DEEP_FIELD
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar


class Depth(Enum):
    """How far a clone reaches into the graph."""

    SHALLOW = auto()
    """Only the root is duplicated; nested references are shared with the original."""

    DEEP = auto()
    """The whole reachable graph is duplicated, preserving shared and cyclic references."""


class Basis(Enum):
    """Which members of a composite make up its state."""

    FIELD = auto()
    """All stored state (slots and instance __dict__), bypassing accessors."""

    PROPERTY = auto()
    """Only state exposed through properties, read and written via getters/setters."""


@dataclass(frozen=True, slots=True)
class CloneMode:
    """A (depth, basis) pair selecting one of the four clone operations."""

    depth: Depth
    basis: Basis

    SHALLOW_FIELD: ClassVar[CloneMode]
    SHALLOW_PROPERTY: ClassVar[CloneMode]
    DEEP_FIELD: ClassVar[CloneMode]
    DEEP_PROPERTY: ClassVar[CloneMode]

    @property
    def deep(self) -> bool:
        return self.depth is Depth.DEEP

    @property
    def property_based(self) -> bool:
        return self.basis is Basis.PROPERTY

    def __str__(self) -> str:
        return f"{self.depth.name.lower()} {self.basis.name.lower()}-based clone"


CloneMode.SHALLOW_FIELD = CloneMode(Depth.SHALLOW, Basis.FIELD)
CloneMode.SHALLOW_PROPERTY = CloneMode(Depth.SHALLOW, Basis.PROPERTY)
CloneMode.DEEP_FIELD = CloneMode(Depth.DEEP, Basis.FIELD)
CloneMode.DEEP_PROPERTY = CloneMode(Depth.DEEP, Basis.PROPERTY)
