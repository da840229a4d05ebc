"""Value types shared by the traversal engine, strategies and resolvers."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field

NodeId = int


class PropertyEntry(BaseModel):
    """One named property/value pair as reported by the property oracle."""

    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(default="", alias="displayName")
    display_value: Any = Field(default=None, alias="displayValue")
    display_category: Optional[str] = Field(default=None, alias="displayCategory")

    @property
    def value_text(self) -> str:
        """Display value rendered as text, empty for missing values."""
        if self.display_value is None:
            return ""
        return str(self.display_value)


class NodeAttributes(BaseModel):
    """Resolved display attributes of a single scene node.

    Field aliases follow the host viewer's camelCase payloads so results of
    ``getProperties`` can be validated directly.
    """

    model_config = ConfigDict(populate_by_name=True)

    dbid: NodeId = Field(alias="dbId")
    name: str = ""
    external_id: str = Field(default="", alias="externalId")
    category: str = ""
    properties: List[PropertyEntry] = Field(default_factory=list)
    known: bool = True

    @classmethod
    def unknown(cls, node_id: NodeId) -> "NodeAttributes":
        """Placeholder for a node whose fetch failed or timed out."""
        return cls(dbid=node_id, known=False)

    def find_property(self, *display_names: str) -> Optional[PropertyEntry]:
        """Return the first property whose display name is one of ``display_names``."""
        wanted = set(display_names)
        for prop in self.properties:
            if prop.display_name in wanted:
                return prop
        return None


class MatchSet:
    """Ordered, duplicate-free collection of node identifiers.

    Iteration yields identifiers in discovery order.
    """

    __slots__ = ("_order", "_seen")

    def __init__(self, ids: Optional[Iterable[NodeId]] = None) -> None:
        self._order: List[NodeId] = []
        self._seen: set = set()
        if ids is not None:
            self.extend(ids)

    def add(self, node_id: NodeId) -> bool:
        """Add ``node_id``; returns False when it was already present."""
        if node_id in self._seen:
            return False
        self._seen.add(node_id)
        self._order.append(node_id)
        return True

    def extend(self, ids: Iterable[NodeId]) -> int:
        """Add every identifier in ``ids``; returns how many were new."""
        return sum(1 for node_id in ids if self.add(node_id))

    def without(self, exclude: Iterable[NodeId]) -> "MatchSet":
        """Copy of this set minus ``exclude``, preserving order."""
        excluded = set(exclude)
        return MatchSet(n for n in self._order if n not in excluded)

    def to_list(self) -> List[NodeId]:
        return list(self._order)

    @property
    def first(self) -> Optional[NodeId]:
        return self._order[0] if self._order else None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._seen

    def __iter__(self) -> Iterator[NodeId]:
        return iter(list(self._order))

    def __len__(self) -> int:
        return len(self._order)

    def __bool__(self) -> bool:
        return bool(self._order)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MatchSet):
            return self._order == other._order
        if isinstance(other, (list, tuple)):
            return self._order == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"MatchSet({self._order!r})"


class TraversalResult(BaseModel):
    """Outcome of one batched breadth-first traversal."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    matches: MatchSet = Field(default_factory=MatchSet)
    visited: int = 0
    oracle_calls: int = 0
    stop_reason: str = "exhausted"
    trail: List[NodeId] = Field(default_factory=list)
    depths: List[int] = Field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        """True when the frontier emptied without any limit firing."""
        return self.stop_reason == "exhausted"


class PathResolution(BaseModel):
    """Best-effort result of resolving a slash-delimited path."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    segments: List[str] = Field(default_factory=list)
    matches: MatchSet = Field(default_factory=MatchSet)
    resolved_depth: int = 0

    @property
    def complete(self) -> bool:
        """True when every segment produced candidates."""
        return bool(self.segments) and self.resolved_depth == len(self.segments) and bool(
            self.matches
        )

    @property
    def failed_segment(self) -> Optional[str]:
        """First segment that yielded no candidates, if any."""
        if self.complete or self.resolved_depth >= len(self.segments):
            return None
        return self.segments[self.resolved_depth]


class SearchOutcome(BaseModel):
    """Result of running the strategy cascade for one term."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    term: str
    strategy: Optional[str] = None
    matches: MatchSet = Field(default_factory=MatchSet)

    @property
    def found(self) -> bool:
        return bool(self.matches)

    @property
    def message(self) -> str:
        """User-visible summary of the search."""
        if not self.matches:
            return f"no elements found for {self.term}"
        return f"found {len(self.matches)} element(s) for {self.term}"


__all__ = [
    "NodeId",
    "PropertyEntry",
    "NodeAttributes",
    "MatchSet",
    "TraversalResult",
    "PathResolution",
    "SearchOutcome",
]
