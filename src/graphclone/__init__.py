"""graphclone: independent copies of arbitrary, possibly cyclic, object graphs.

Usage:
    from graphclone import ReflectiveCloner

    @dataclass
    class Node:
        value: int
        next: "Node | None" = None

    node = Node(1)
    node.next = node  # cycle

    cloner = ReflectiveCloner()
    copy = cloner.deep_field_clone(node)
    assert copy is not node and copy.next is copy
"""

__version__ = "0.1.0"

# Cloning backends
from graphclone.cloners import (
    CloneFactory,
    CompiledCloner,
    PickleSerializer,
    ReflectiveCloner,
    RoundTripCloner,
    Serializer,
    StateCopier,
    create_clone_factory,
    deep_field_clone,
    deep_property_clone,
    get_clone_factory,
    reset_clone_factory,
    shallow_field_clone,
    shallow_property_clone,
)

# Configuration
from graphclone.config import CloneSettings, CloneStrategy

# Core primitives
from graphclone.core import (
    Basis,
    CloneError,
    CloneMode,
    Cloned,
    ConstructionError,
    Depth,
    ModeUnsupportedError,
    SerializationError,
    TypePlanCache,
    WriteError,
    get_plan_cache,
    register_atomic_type,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Cloned",
    "CloneMode",
    "Depth",
    "Basis",
    "TypePlanCache",
    "get_plan_cache",
    "register_atomic_type",
    # Errors
    "CloneError",
    "ConstructionError",
    "WriteError",
    "ModeUnsupportedError",
    "SerializationError",
    # Cloners
    "CloneFactory",
    "StateCopier",
    "ReflectiveCloner",
    "CompiledCloner",
    "RoundTripCloner",
    "Serializer",
    "PickleSerializer",
    "create_clone_factory",
    "get_clone_factory",
    "reset_clone_factory",
    "shallow_field_clone",
    "shallow_property_clone",
    "deep_field_clone",
    "deep_property_clone",
    # Configuration
    "CloneSettings",
    "CloneStrategy",
]
