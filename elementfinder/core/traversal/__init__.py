"""Batched breadth-first traversal engine and its components."""

from .engine import DEFAULT_BATCH_SIZE, BatchTraversal, fetch_attributes, traverse
from .protection import LimitReached, TraversalGuard, TraversalLimits
from .queue_manager import TraversalFrontier
from .trail_tracker import VisitTrail

__all__ = [
    "BatchTraversal",
    "traverse",
    "fetch_attributes",
    "DEFAULT_BATCH_SIZE",
    "TraversalLimits",
    "TraversalGuard",
    "LimitReached",
    "TraversalFrontier",
    "VisitTrail",
]
