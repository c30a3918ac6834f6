"""Graph walker: the recursive cloning algorithm."""

from graphclone.core.walker.walker import GraphWalker

__all__ = ["GraphWalker"]
