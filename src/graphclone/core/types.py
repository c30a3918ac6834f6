"""Core type definitions for graphclone."""

type Cloned[T] = T
"""Type alias indicating a value is a clone detached from its original.

When you see `Cloned[T]` in a return type, the returned graph shares no mutable
state with the argument (for deep clones) or only nested references (for shallow
clones). Atomic values are the exception: they are immutable and returned as-is.
"""
