"""Clone modes: depth and basis axes."""

from graphclone.core.mode.models import Basis, CloneMode, Depth

__all__ = [
    "Basis",
    "CloneMode",
    "Depth",
]
