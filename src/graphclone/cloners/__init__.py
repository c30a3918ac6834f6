"""Cloning backends."""

from graphclone.cloners.compiled import CompiledCloner, CompiledRoutine
from graphclone.cloners.protocol import CloneFactory, StateCopier
from graphclone.cloners.reflective import ReflectiveCloner
from graphclone.cloners.roundtrip import PickleSerializer, RoundTripCloner, Serializer
from graphclone.cloners.selection import (
    create_clone_factory,
    deep_field_clone,
    deep_property_clone,
    get_clone_factory,
    reset_clone_factory,
    shallow_field_clone,
    shallow_property_clone,
)

__all__ = [
    # Protocols
    "CloneFactory",
    "StateCopier",
    "Serializer",
    # Backends
    "ReflectiveCloner",
    "CompiledCloner",
    "CompiledRoutine",
    "RoundTripCloner",
    "PickleSerializer",
    # Selection
    "create_clone_factory",
    "get_clone_factory",
    "reset_clone_factory",
    "shallow_field_clone",
    "shallow_property_clone",
    "deep_field_clone",
    "deep_property_clone",
]
