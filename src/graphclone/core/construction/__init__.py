"""Construction strategy for fresh clone targets."""

from graphclone.core.construction.core import Constructor, construct

__all__ = [
    "Constructor",
    "construct",
]
