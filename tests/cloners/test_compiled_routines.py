"""Tests specific to the compiled cloner's routine cache.

Critical Invariants:
- One routine per (type, mode), compiled on first use and reused afterwards
- Concurrent first uses publish exactly one routine
- A routine produces the same clone as the reflective walker
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from graphclone import CloneMode, CompiledCloner, ReflectiveCloner, register_atomic_type
from graphclone.core.plan import PlanKind


class Point:
    def __init__(self, x=0, y=0):
        self.x = x
        self.y = y


class Segment:
    __slots__ = ("start", "end")

    def __init__(self, start, end):
        self.start = start
        self.end = end


def test_routine_compiled_once_per_type_and_mode(compiled):
    assert compiled.routine_count == 0

    compiled.deep_field_clone(Point(1, 2))
    after_first = compiled.routine_count
    compiled.deep_field_clone(Point(3, 4))

    assert after_first > 0
    assert compiled.routine_count == after_first, "Second clone must reuse routines"


def test_modes_get_distinct_routines(compiled):
    field_routine = compiled.routine_for(Point, CloneMode.DEEP_FIELD)
    property_routine = compiled.routine_for(Point, CloneMode.DEEP_PROPERTY)
    assert field_routine is not property_routine
    assert compiled.routine_for(Point, CloneMode.DEEP_FIELD) is field_routine


def test_atomic_types_get_pass_through_routines(compiled):
    routine = compiled.routine_for(int, CloneMode.DEEP_FIELD)
    assert routine.kind is PlanKind.ATOMIC


def test_clear_drops_routines(compiled):
    compiled.deep_field_clone([Point()])
    compiled.clear()
    assert compiled.routine_count == 0


def test_concurrent_clones_share_routines():
    """CRITICAL: Racing first uses must not yield two live routines for one key."""
    cloner = CompiledCloner()
    barrier = threading.Barrier(4, timeout=5)
    graph = [Segment(Point(0, 0), Point(1, 1)) for _ in range(10)]

    def clone_after_barrier():
        barrier.wait()
        return cloner.deep_field_clone(graph)

    with ThreadPoolExecutor(max_workers=4) as pool:
        clones = list(pool.map(lambda _: clone_after_barrier(), range(4)))

    for clone in clones:
        assert [(s.start.x, s.end.y) for s in clone] == [(0, 1)] * 10
    routine = cloner.routine_for(Segment, CloneMode.DEEP_FIELD)
    assert all(cloner.routine_for(Segment, CloneMode.DEEP_FIELD) is routine for _ in range(3))


def test_compiled_matches_reflective(plans):
    shared = Point(5, 6)
    graph = {"segments": [Segment(shared, Point(7, 8)), Segment(shared, shared)]}

    reflective = ReflectiveCloner(plans=plans).deep_field_clone(graph)
    compiled = CompiledCloner(plans=plans).deep_field_clone(graph)

    for clone in (reflective, compiled):
        first, second = clone["segments"]
        assert first.start is second.start is second.end
        assert first.start is not shared
        assert (first.end.x, first.end.y) == (7, 8)


def test_registering_atomic_type_after_clear():
    class Token:
        def __init__(self):
            self.value = [1]

    cloner = CompiledCloner()
    token = Token()
    assert cloner.deep_field_clone(token) is not token

    register_atomic_type(Token)
    cloner.clear()

    assert cloner.deep_field_clone(token) is token
