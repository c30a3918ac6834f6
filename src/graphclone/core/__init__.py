"""Core functionalities: the stateless building blocks of the cloning engine.

Architecture Note:
    core/ holds the engine's primitives: modes, errors, identity maps, type plans,
    construction and the graph walker. The only process-wide state is the plan
    cache, which is append-only. The interchangeable cloning backends built on top
    of these live in cloners/.
"""

from graphclone.core.construction import Constructor, construct
from graphclone.core.errors import (
    CloneError,
    ConstructionError,
    ModeUnsupportedError,
    SerializationError,
    WriteError,
)
from graphclone.core.identity import IdentityMap
from graphclone.core.mode import Basis, CloneMode, Depth
from graphclone.core.plan import (
    ContainerShape,
    DefaultTypeIntrospector,
    MemberDescriptor,
    MemberStorage,
    PlanKind,
    TypeIntrospector,
    TypePlan,
    TypePlanCache,
    get_plan_cache,
    register_atomic_type,
)
from graphclone.core.types import Cloned
from graphclone.core.walker import GraphWalker

__all__ = [
    # Types
    "Cloned",
    # Mode
    "CloneMode",
    "Depth",
    "Basis",
    # Errors
    "CloneError",
    "ConstructionError",
    "WriteError",
    "ModeUnsupportedError",
    "SerializationError",
    # Identity
    "IdentityMap",
    # Plan
    "PlanKind",
    "ContainerShape",
    "MemberStorage",
    "MemberDescriptor",
    "TypePlan",
    "TypeIntrospector",
    "DefaultTypeIntrospector",
    "TypePlanCache",
    "get_plan_cache",
    "register_atomic_type",
    # Construction
    "Constructor",
    "construct",
    # Walker
    "GraphWalker",
]
