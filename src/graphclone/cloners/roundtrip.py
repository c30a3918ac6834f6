"""Round-trip cloner: encode the graph to bytes, then decode a fresh graph.

The slowest backend but the most hands-off one: the serializer reconstructs
shared and cyclic references on its own. It always produces a deep field-based
clone; shallow and property-based requests are refused before any work is done.

Usage:
    cloner = RoundTripCloner()
    copy = cloner.deep_field_clone(graph)
"""

from __future__ import annotations

import logging
import pickle  # nosec B403 - only round-trips graphs the caller already holds in memory
from typing import Any, Protocol, TypeVar, runtime_checkable

from graphclone.core.errors import ModeUnsupportedError, SerializationError
from graphclone.core.mode import CloneMode
from graphclone.core.plan import PlanKind, TypePlanCache, get_plan_cache
from graphclone.core.types import Cloned

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class Serializer(Protocol):
    """Byte-oriented encode/decode collaborator."""

    def dumps(self, value: Any) -> bytes:
        """Encode a whole graph.

        Raises:
            SerializationError: If the graph cannot be encoded.
        """
        ...

    def loads(self, data: bytes) -> Any:
        """Decode a graph produced by dumps().

        Raises:
            SerializationError: If the data cannot be decoded.
        """
        ...


class PickleSerializer:
    """Serializer based on pickle.

    Args:
        protocol: Pickle protocol (2 or higher allocates objects without __init__).
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self._protocol = protocol

    @property
    def protocol(self) -> int:
        return self._protocol

    def dumps(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise SerializationError(
                f"Cannot serialize {type(value).__qualname__}: {exc}"
            ) from exc

    def loads(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)  # nosec B301 - data comes from dumps() in this process
        except (pickle.UnpicklingError, AttributeError, ImportError, EOFError, TypeError) as exc:
            raise SerializationError(f"Cannot deserialize graph: {exc}") from exc


class RoundTripCloner:
    """Clone factory that copies graphs through a serializer.

    Args:
        serializer: Encode/decode collaborator (PickleSerializer by default).
        plans: Plan cache used to short-circuit atomic values.
    """

    def __init__(
        self,
        serializer: Serializer | None = None,
        plans: TypePlanCache | None = None,
    ) -> None:
        self._serializer = serializer or PickleSerializer()
        self._plans = plans if plans is not None else get_plan_cache()

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    def clone(self, value: T, mode: CloneMode) -> Cloned[T]:
        """Clone `value`; only CloneMode.DEEP_FIELD is supported.

        Raises:
            ModeUnsupportedError: For shallow or property-based modes.
            SerializationError: If the graph cannot be serialized.
        """
        if mode != CloneMode.DEEP_FIELD:
            raise ModeUnsupportedError(type(self).__name__, mode)
        if value is None:
            return None  # type: ignore[return-value]
        if self._plans.get_or_build(type(value), mode.basis).kind is PlanKind.ATOMIC:
            return value
        data = self._serializer.dumps(value)
        logger.debug(f"Round-tripping {type(value).__qualname__} through {len(data)} bytes")
        return self._serializer.loads(data)  # type: ignore[no-any-return]

    def shallow_field_clone(self, value: T) -> Cloned[T]:
        """Always raises ModeUnsupportedError."""
        return self.clone(value, CloneMode.SHALLOW_FIELD)

    def shallow_property_clone(self, value: T) -> Cloned[T]:
        """Always raises ModeUnsupportedError."""
        return self.clone(value, CloneMode.SHALLOW_PROPERTY)

    def deep_field_clone(self, value: T) -> Cloned[T]:
        """Duplicate the whole reachable graph by serializing it."""
        return self.clone(value, CloneMode.DEEP_FIELD)

    def deep_property_clone(self, value: T) -> Cloned[T]:
        """Always raises ModeUnsupportedError."""
        return self.clone(value, CloneMode.DEEP_PROPERTY)
