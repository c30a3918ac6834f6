"""Type plans: classification, members and the process-wide plan cache."""

from graphclone.core.plan.cache import TypePlanCache, get_plan_cache, register_atomic_type
from graphclone.core.plan.introspection import DefaultTypeIntrospector, TypeIntrospector
from graphclone.core.plan.models import (
    ContainerShape,
    MemberDescriptor,
    MemberStorage,
    PlanKind,
    TypePlan,
)

__all__ = [
    # Models
    "PlanKind",
    "ContainerShape",
    "MemberStorage",
    "MemberDescriptor",
    "TypePlan",
    # Introspection
    "TypeIntrospector",
    "DefaultTypeIntrospector",
    # Cache
    "TypePlanCache",
    "get_plan_cache",
    "register_atomic_type",
]
