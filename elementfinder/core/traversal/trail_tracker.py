"""Trail tracking for batched traversals.

Records every node whose attributes were resolved, in resolution order,
together with its breadth-first depth below the traversal root.
"""

from __future__ import annotations

from typing import List, Tuple

from elementfinder.core.types import NodeId


class VisitTrail:
    """Ordered ``(node_id, depth)`` steps of one traversal."""

    def __init__(self) -> None:
        self._steps: List[Tuple[NodeId, int]] = []

    def record_step(self, node_id: NodeId, depth: int) -> None:
        """Record one resolved node at ``depth`` below the root."""
        self._steps.append((node_id, depth))

    def node_ids(self) -> List[NodeId]:
        return [node_id for node_id, _ in self._steps]

    def depths(self) -> List[int]:
        return [depth for _, depth in self._steps]

    @property
    def length(self) -> int:
        return len(self._steps)
