"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from graphclone import CompiledCloner, ReflectiveCloner, TypePlanCache


@pytest.fixture
def plans():
    """Fresh plan cache, isolated from the process-wide one."""
    return TypePlanCache()


@pytest.fixture(params=["reflective", "compiled"])
def cloner(request, plans):
    """Every backend that supports all four clone modes."""
    if request.param == "compiled":
        return CompiledCloner(plans=plans)
    return ReflectiveCloner(plans=plans)


@pytest.fixture
def reflective(plans):
    return ReflectiveCloner(plans=plans)


@pytest.fixture
def compiled(plans):
    return CompiledCloner(plans=plans)
