"""Type protocols for the collaborators the search core depends on.

The concrete implementations live in the host viewer runtime; the core
only relies on these contracts.
"""

from typing import Callable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .types import NodeAttributes, NodeId

RGBA = Tuple[float, float, float, float]


@runtime_checkable
class TreeAccessor(Protocol):
    """Synchronous access to the instance tree of the loaded model."""

    def get_root_id(self) -> Optional[NodeId]:
        """Return the root identifier, or None when no model is loaded."""
        ...

    def enum_node_children(self, node_id: NodeId, visit: Callable[[NodeId], None]) -> None:
        """Call ``visit`` once per direct child of ``node_id``."""
        ...

    def get_child_count(self, node_id: NodeId) -> int:
        """Return the number of direct children of ``node_id``."""
        ...

    def get_parent_id(self, node_id: NodeId) -> NodeId:
        """Return the parent identifier; 0 or ``node_id`` itself means no parent."""
        ...


@runtime_checkable
class PropertyOracle(Protocol):
    """Asynchronous access to node attributes."""

    async def get_properties(self, node_id: NodeId) -> NodeAttributes:
        """Fetch the display attributes of ``node_id``.

        Raises:
            OracleError: If the fetch fails for this node
            OracleUnavailableError: If the host runtime is gone
        """
        ...

    async def native_search(
        self, term: str, attribute_names: Optional[Sequence[str]] = None
    ) -> List[NodeId]:
        """Run the host's indexed substring search, optionally field-restricted."""
        ...


@runtime_checkable
class Presenter(Protocol):
    """Fire-and-forget presentation primitives of the viewer."""

    def clear_selection(self) -> None:
        ...

    def select(self, node_ids: List[NodeId]) -> None:
        ...

    def fit_to_view(self, node_ids: List[NodeId]) -> None:
        ...

    def set_theming_color(self, node_id: NodeId, color: RGBA) -> None:
        ...

    def show_element_info(self, node_id: NodeId, attributes: NodeAttributes) -> None:
        ...


__all__ = ["TreeAccessor", "PropertyOracle", "Presenter", "RGBA"]
