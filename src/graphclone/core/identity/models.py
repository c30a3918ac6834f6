"""Identity map scoped to a single clone operation.

Usage:
    identity = IdentityMap()
    identity.put(original, clone)
    assert identity.get(original) is clone
"""

from __future__ import annotations

from typing import Any


class IdentityMap:
    """Maps source objects, by reference identity, to their already-produced clones.

    Keys are `id()` values, never equality: two equal but distinct objects are
    independent referents. The source object is held alongside its clone so its id
    cannot be recycled by the allocator while the clone operation is running.
    Clones are never None (None is atomic and never registered), so `get` uses None
    to signal a miss.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[int, tuple[Any, Any]] = {}

    def get(self, source: Any) -> Any | None:
        """Return the clone registered for `source`, or None if there is none yet."""
        entry = self._entries.get(id(source))
        if entry is None:
            return None
        return entry[1]

    def put(self, source: Any, clone: Any) -> None:
        """Register `clone` as the clone of `source`.

        Must happen before the source's members are walked so that cycles back to
        `source` resolve to the in-progress clone.
        """
        self._entries[id(source)] = (source, clone)

    def __contains__(self, source: object) -> bool:
        return id(source) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
