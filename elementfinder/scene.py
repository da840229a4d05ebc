"""In-memory scene graph implementing the collaborator protocols.

``SceneGraph`` stands in for a loaded viewer model: it answers tree
queries synchronously, serves attributes through an awaitable oracle with
optional simulated latency and failures, and records presentation calls.
It backs the examples and the test suite.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, Field

from elementfinder.core.protocols import RGBA
from elementfinder.core.types import NodeAttributes, NodeId, PropertyEntry
from elementfinder.exceptions import OracleError, OracleUnavailableError


class SceneNode(BaseModel):
    """A node of the in-memory scene graph."""

    dbid: NodeId
    name: str = ""
    external_id: str = ""
    category: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict)
    parent: NodeId = 0
    children: List[NodeId] = Field(default_factory=list)

    def attributes(self) -> NodeAttributes:
        return NodeAttributes(
            dbid=self.dbid,
            name=self.name,
            external_id=self.external_id,
            category=self.category,
            properties=[
                PropertyEntry(display_name=k, display_value=v)
                for k, v in self.properties.items()
            ],
        )


class SceneGraph:
    """Instance tree, property oracle and presenter for one loaded model.

    Example:
        >>> scene = SceneGraph()
        >>> root = scene.add_root("Model")
        >>> beam = scene.add_node(root, "Beam-1", properties={"Mark": "B1"})
    """

    def __init__(
        self,
        latency: float = 0.0,
        jitter: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        """Initialize an empty scene.

        Args:
            latency: Base delay in seconds applied to every oracle call
            jitter: Extra random delay (0..jitter) so calls finish out of order
            seed: Seed for the jitter generator
        """
        self._nodes: Dict[NodeId, SceneNode] = {}
        self._root_id: Optional[NodeId] = None
        self._next_id = 1
        self._latency = latency
        self._jitter = jitter
        self._random = random.Random(seed)
        self.available = True
        self.failing: Set[NodeId] = set()
        self.hanging: Set[NodeId] = set()

        # Oracle instrumentation
        self.property_calls: List[NodeId] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.search_calls: List[Tuple[str, Optional[List[str]]]] = []

        # Presenter state
        self.selection: List[NodeId] = []
        self.fitted: List[NodeId] = []
        self.theming: Dict[NodeId, RGBA] = {}
        self.info: Optional[Tuple[NodeId, NodeAttributes]] = None
        self.presenter_log: List[str] = []

    # ----------------- BUILDING -----------------

    def add_root(
        self, name: str = "Model", dbid: Optional[NodeId] = None, **kwargs: Any
    ) -> NodeId:
        """Create the root node; its parent sentinel is 0."""
        node_id = self._allocate(dbid)
        self._nodes[node_id] = SceneNode(dbid=node_id, name=name, parent=0, **kwargs)
        self._root_id = node_id
        return node_id

    def add_node(
        self,
        parent: NodeId,
        name: str = "",
        dbid: Optional[NodeId] = None,
        **kwargs: Any,
    ) -> NodeId:
        """Create a child of ``parent`` and return its identifier."""
        if parent not in self._nodes:
            raise KeyError(f"Unknown parent node {parent}")
        node_id = self._allocate(dbid)
        self._nodes[node_id] = SceneNode(dbid=node_id, name=name, parent=parent, **kwargs)
        self._nodes[parent].children.append(node_id)
        return node_id

    def link(self, parent: NodeId, child: NodeId) -> None:
        """Add an extra child edge without reparenting (for malformed trees)."""
        self._nodes[parent].children.append(child)

    def unload(self) -> None:
        """Drop the model so the scene reports no root."""
        self._root_id = None

    def node(self, node_id: NodeId) -> SceneNode:
        return self._nodes[node_id]

    def reachable_ids(self) -> List[NodeId]:
        """Identifiers reachable from the root, each listed once."""
        if self._root_id is None:
            return []
        seen: List[NodeId] = []
        stack = [self._root_id]
        marked = {self._root_id}
        while stack:
            current = stack.pop()
            seen.append(current)
            for child in self._nodes[current].children:
                if child not in marked:
                    marked.add(child)
                    stack.append(child)
        return seen

    def _allocate(self, dbid: Optional[NodeId]) -> NodeId:
        if dbid is None:
            while self._next_id in self._nodes:
                self._next_id += 1
            dbid = self._next_id
        if dbid in self._nodes:
            raise ValueError(f"Node {dbid} already exists")
        self._next_id = max(self._next_id, dbid + 1)
        return dbid

    # ----------------- TREE ACCESSOR -----------------

    def get_root_id(self) -> Optional[NodeId]:
        return self._root_id

    def enum_node_children(self, node_id: NodeId, visit: Callable[[NodeId], None]) -> None:
        node = self._nodes.get(node_id)
        if node is None:
            return
        for child in list(node.children):
            visit(child)

    def get_child_count(self, node_id: NodeId) -> int:
        node = self._nodes.get(node_id)
        return len(node.children) if node else 0

    def get_parent_id(self, node_id: NodeId) -> NodeId:
        node = self._nodes.get(node_id)
        return node.parent if node else 0

    # ----------------- PROPERTY ORACLE -----------------

    async def _delay(self) -> None:
        delay = self._latency
        if self._jitter:
            delay += self._random.uniform(0, self._jitter)
        await asyncio.sleep(delay)

    async def get_properties(self, node_id: NodeId) -> NodeAttributes:
        if not self.available:
            raise OracleUnavailableError("Scene runtime is not available")
        self.property_calls.append(node_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if node_id in self.hanging:
                await asyncio.Event().wait()
            await self._delay()
            if node_id in self.failing:
                raise OracleError(f"Property fetch failed for node {node_id}", node_id=node_id)
            node = self._nodes.get(node_id)
            if node is None:
                raise OracleError(f"Unknown node {node_id}", node_id=node_id)
            return node.attributes()
        finally:
            self.in_flight -= 1

    async def native_search(
        self, term: str, attribute_names: Optional[Sequence[str]] = None
    ) -> List[NodeId]:
        if not self.available:
            raise OracleUnavailableError("Scene runtime is not available")
        fields = list(attribute_names) if attribute_names else None
        self.search_calls.append((term, fields))
        await self._delay()
        needle = term.lower()
        hits: List[NodeId] = []
        for node_id in self.reachable_ids():
            node = self._nodes[node_id]
            for key, value in self._searchable(node, fields):
                if needle in str(value).lower():
                    hits.append(node_id)
                    break
        return hits

    @staticmethod
    def _searchable(node: SceneNode, fields: Optional[List[str]]) -> Iterable[Tuple[str, Any]]:
        if "Name" not in node.properties and (fields is None or "Name" in fields):
            yield "Name", node.name
        for key, value in node.properties.items():
            if fields is None or key in fields:
                yield key, value

    # ----------------- PRESENTER -----------------

    def clear_selection(self) -> None:
        self.presenter_log.append("clear_selection")
        self.selection = []

    def select(self, node_ids: List[NodeId]) -> None:
        self.presenter_log.append("select")
        self.selection = list(node_ids)

    def fit_to_view(self, node_ids: List[NodeId]) -> None:
        self.presenter_log.append("fit_to_view")
        self.fitted = list(node_ids)

    def set_theming_color(self, node_id: NodeId, color: RGBA) -> None:
        self.presenter_log.append("set_theming_color")
        self.theming[node_id] = color

    def show_element_info(self, node_id: NodeId, attributes: NodeAttributes) -> None:
        self.presenter_log.append("show_element_info")
        self.info = (node_id, attributes)


__all__ = ["SceneGraph", "SceneNode"]
