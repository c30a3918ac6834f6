"""Tests for the graph walker.

Critical Invariants:
- Deep walks register a clone before walking its members
- Shallow walks never consult or fill the identity map
- State transfer only happens between instances of the same composite type
"""

import pytest

from graphclone.core.mode import CloneMode
from graphclone.core.walker import GraphWalker


class Node:
    def __init__(self, value=0, next=None):
        self.value = value
        self.next = next


class Other:
    pass


def test_deep_walk_registers_every_mutable_object(plans):
    tail = Node(2)
    head = Node(1, tail)
    walker = GraphWalker(CloneMode.DEEP_FIELD, plans=plans)

    clone = walker.walk(head)

    assert head in walker.identity
    assert tail in walker.identity
    assert walker.identity.get(tail) is clone.next
    assert len(walker.identity) == 2


def test_shallow_walk_leaves_identity_map_empty(plans):
    walker = GraphWalker(CloneMode.SHALLOW_FIELD, plans=plans)
    node = Node(1, Node(2))

    clone = walker.walk(node)

    assert clone.next is node.next
    assert len(walker.identity) == 0


def test_walk_returns_atomic_values_unchanged(plans):
    walker = GraphWalker(CloneMode.DEEP_FIELD, plans=plans)
    text = "shared"
    assert walker.walk(text) is text
    assert walker.walk(None) is None
    assert len(walker.identity) == 0


def test_transfer_state_into_existing_target(plans):
    walker = GraphWalker(CloneMode.DEEP_FIELD, plans=plans)
    source = Node(7)
    source.next = source
    target = Node()

    walker.transfer_state(source, target)

    assert target.value == 7
    assert target.next is target, "Cycles back to the source resolve to the target"


def test_transfer_state_rejects_mismatched_target(plans):
    walker = GraphWalker(CloneMode.DEEP_FIELD, plans=plans)
    with pytest.raises(TypeError):
        walker.transfer_state(Node(), Other())


def test_transfer_state_rejects_non_composites(plans):
    walker = GraphWalker(CloneMode.SHALLOW_FIELD, plans=plans)
    with pytest.raises(TypeError):
        walker.transfer_state([1], [2])


class Counter:
    def __init__(self):
        self.count = 0
        self.callback = self.bump

    def bump(self):
        self.count += 1


def test_deep_walk_registers_rebound_methods(plans):
    counter = Counter()
    walker = GraphWalker(CloneMode.DEEP_FIELD, plans=plans)

    clone = walker.walk(counter)

    assert walker.identity.get(counter.callback) is clone.callback
    assert clone.callback.__self__ is clone


def test_shallow_walk_returns_bound_method_unchanged(plans):
    counter = Counter()
    walker = GraphWalker(CloneMode.SHALLOW_FIELD, plans=plans)
    assert walker.walk(counter.callback) is counter.callback
