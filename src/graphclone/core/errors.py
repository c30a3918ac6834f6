"""Error kinds raised by the cloning engine.

Every error derives from CloneError. Each also derives from the builtin exception
callers would naturally expect (TypeError for construction failures, AttributeError
for unwritable members, NotImplementedError for unsupported modes) so existing
`except` clauses keep working.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graphclone.core.mode import CloneMode


class CloneError(Exception):
    """Base class for all cloning failures."""

    pass


class ConstructionError(CloneError, TypeError):
    """Raised when no construction strategy can produce an instance of a type.

    Fatal to the clone operation: the caller never receives a partial graph.
    """

    def __init__(self, cls: type, reason: str) -> None:
        super().__init__(f"Cannot construct {cls.__module__}.{cls.__qualname__}: {reason}")
        self.cls = cls
        self.reason = reason


class WriteError(CloneError, AttributeError):
    """Raised when a member cannot be written during a property-based clone.

    Recovered locally: the walker skips the member and keeps cloning.
    """

    def __init__(self, cls: type, member: str) -> None:
        super().__init__(f"Property '{member}' of {cls.__qualname__} has no usable setter")
        self.cls = cls
        self.member = member


class ModeUnsupportedError(CloneError, NotImplementedError):
    """Raised when a cloner is asked for a mode its mechanism cannot honor."""

    def __init__(self, cloner: str, mode: CloneMode) -> None:
        super().__init__(f"{cloner} does not support {mode}")
        self.cloner = cloner
        self.mode = mode


class SerializationError(CloneError):
    """Raised when the round-trip serializer cannot encode or decode a graph."""

    pass
