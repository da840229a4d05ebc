"""Frontier management for batched breadth-first traversals.

A frontier couples the pending work queue with the visited set so that an
identifier is enqueued at most once per traversal, even when the tree
accessor reports the same child under several parents.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Set

from elementfinder.core.types import NodeId


class TraversalFrontier:
    """Work queue plus visited set scoped to a single traversal call."""

    def __init__(self) -> None:
        self._pending: Deque[NodeId] = deque()
        self._visited: Set[NodeId] = set()

    def push(self, node_id: NodeId) -> bool:
        """Enqueue ``node_id`` unless it was already seen.

        Returns:
            True if the node was enqueued
        """
        if node_id in self._visited:
            return False
        self._visited.add(node_id)
        self._pending.append(node_id)
        return True

    def take_batch(self, size: int) -> List[NodeId]:
        """Dequeue up to ``size`` identifiers from the front of the queue."""
        batch: List[NodeId] = []
        while self._pending and len(batch) < size:
            batch.append(self._pending.popleft())
        return batch

    def __bool__(self) -> bool:
        return bool(self._pending)
