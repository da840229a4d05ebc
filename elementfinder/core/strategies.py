"""Search strategies and the cascade that orders them.

Each strategy shares one interface, ``run(context, term) -> MatchSet``.
The cascade tries them in order, cheapest and most precise first, and
stops at the first one that finds anything. Reordering or adding a
strategy is a change to the list returned by ``default_strategies``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Callable, List, Optional, Sequence

from elementfinder.config import SearchConfig
from elementfinder.exceptions import OracleError, OracleUnavailableError

from .protocols import PropertyOracle, TreeAccessor
from .traversal import BatchTraversal, TraversalLimits, fetch_attributes
from .types import MatchSet, NodeAttributes, NodeId, SearchOutcome

logger = logging.getLogger(__name__)

_BRACKETED = re.compile(r"\[.*?\]")


class SearchContext:
    """Collaborators and settings shared by the strategies of one search."""

    def __init__(
        self,
        tree: Optional[TreeAccessor],
        oracle: PropertyOracle,
        config: SearchConfig,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.tree = tree
        self.oracle = oracle
        self.config = config
        self.cancel_event = cancel_event

    @property
    def root_id(self) -> Optional[NodeId]:
        if self.tree is None:
            return None
        return self.tree.get_root_id()

    def traversal(self, batch_size: Optional[int] = None) -> BatchTraversal:
        return BatchTraversal(self.tree, self.oracle, batch_size or self.config.batch_size)

    async def fetch(self, node_id: NodeId) -> NodeAttributes:
        """Fetch one node's attributes with the configured timeout."""
        timeout = self.config.oracle_timeout or None
        return await fetch_attributes(self.oracle, node_id, timeout)

    def limits(self, **overrides) -> TraversalLimits:
        """Traversal limits derived from the configuration."""
        values = {
            "oracle_timeout": self.config.oracle_timeout,
            "max_execution_time": self.config.max_execution_time,
        }
        values.update(overrides)
        return TraversalLimits(**values)


def parse_node_id(term: str) -> Optional[NodeId]:
    """Return ``term`` as a node identifier when it is a plain integer."""
    text = term.strip()
    try:
        value = int(text)
    except ValueError:
        return None
    return value if value > 0 else None


def strip_brackets(term: str) -> str:
    """Remove every ``[...]`` annotation, e.g. ``"Panel [100]"`` -> ``"Panel"``."""
    return _BRACKETED.sub("", term).strip()


def name_contains(term: str) -> Callable[[NodeAttributes], bool]:
    """Predicate: name or external id contains ``term``, ignoring case."""
    needle = term.lower()

    def predicate(attrs: NodeAttributes) -> bool:
        return needle in attrs.name.lower() or needle in attrs.external_id.lower()

    return predicate


def any_property_contains(term: str) -> Callable[[NodeAttributes], bool]:
    """Predicate: some property's display name or value contains ``term``."""
    needle = term.lower()

    def predicate(attrs: NodeAttributes) -> bool:
        for prop in attrs.properties:
            if needle in prop.value_text.lower() or needle in prop.display_name.lower():
                return True
        return False

    return predicate


class SearchStrategy:
    """Base class for one way of turning a term into node identifiers."""

    name: str = "strategy"

    async def run(self, context: SearchContext, term: str) -> MatchSet:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class ExactIdStrategy(SearchStrategy):
    """An integer term is taken as the node identifier itself."""

    name = "exact_id"

    async def run(self, context: SearchContext, term: str) -> MatchSet:
        node_id = parse_node_id(term)
        if node_id is None:
            return MatchSet()
        return MatchSet([node_id])


class InstanceTreeStrategy(SearchStrategy):
    """Breadth-first name / external id substring match from the root."""

    name = "instance_tree"

    async def run(self, context: SearchContext, term: str) -> MatchSet:
        if not term.strip():
            return MatchSet()
        result = await context.traversal().run(
            context.root_id,
            name_contains(term.strip()),
            limits=context.limits(),
            cancel_event=context.cancel_event,
        )
        return result.matches


class NativeSearchStrategy(SearchStrategy):
    """Delegate to the host's indexed search, restricted to name fields."""

    name = "native_search"

    def __init__(self, attribute_names: Optional[Sequence[str]] = None) -> None:
        self.attribute_names = list(attribute_names) if attribute_names else None

    async def run(self, context: SearchContext, term: str) -> MatchSet:
        if context.root_id is None or not term.strip():
            return MatchSet()
        fields = self.attribute_names or context.config.native_search_fields
        timeout = context.config.oracle_timeout or None
        try:
            ids = await asyncio.wait_for(
                context.oracle.native_search(term.strip(), fields), timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Native search for '{term}' timed out after {timeout}s")
            return MatchSet()
        except OracleUnavailableError:
            raise
        except OracleError as e:
            logger.warning(f"Native search for '{term}' failed: {e.message}")
            return MatchSet()
        logger.debug(f"Native search for '{term}' returned {len(ids)} ids")
        return MatchSet(ids)


class DeepSubstringStrategy(SearchStrategy):
    """Brute-force property scan over leaf nodes, capped in node count."""

    name = "deep_substring"

    def __init__(self, max_nodes: Optional[int] = None) -> None:
        self.max_nodes = max_nodes

    async def run(self, context: SearchContext, term: str) -> MatchSet:
        if context.tree is None or not term.strip():
            return MatchSet()
        tree = context.tree
        max_nodes = (
            self.max_nodes if self.max_nodes is not None else context.config.deep_scan_max_nodes
        )
        result = await context.traversal().run(
            context.root_id,
            any_property_contains(term.strip()),
            limits=context.limits(max_nodes=max_nodes),
            cancel_event=context.cancel_event,
            node_filter=lambda node_id: tree.get_child_count(node_id) == 0,
        )
        if result.stop_reason == "max_nodes":
            logger.info(f"Deep scan for '{term}' stopped after {result.oracle_calls} leaf nodes")
        return result.matches


class BracketStrippedStrategy(SearchStrategy):
    """Retry the instance tree search with ``[...]`` annotations removed."""

    name = "bracket_stripped"

    def __init__(self, inner: Optional[SearchStrategy] = None) -> None:
        self.inner = inner or InstanceTreeStrategy()

    async def run(self, context: SearchContext, term: str) -> MatchSet:
        cleaned = strip_brackets(term)
        if not cleaned or cleaned == term.strip():
            return MatchSet()
        logger.debug(f"Trying again with cleaned term: '{cleaned}'")
        return await self.inner.run(context, cleaned)


def default_strategies(config: Optional[SearchConfig] = None) -> List[SearchStrategy]:
    """The standard cascade order, cheapest and most precise first."""
    config = config or SearchConfig()
    return [
        ExactIdStrategy(),
        InstanceTreeStrategy(),
        NativeSearchStrategy(config.native_search_fields),
        DeepSubstringStrategy(config.deep_scan_max_nodes),
        BracketStrippedStrategy(),
    ]


class StrategyCascade:
    """Ordered list of strategies tried until one yields matches."""

    def __init__(self, strategies: Optional[Sequence[SearchStrategy]] = None) -> None:
        self.strategies: List[SearchStrategy] = list(
            strategies if strategies is not None else default_strategies()
        )

    async def run(self, context: SearchContext, term: str) -> SearchOutcome:
        """Run the strategies in order for ``term``.

        Returns:
            SearchOutcome naming the strategy that produced the matches
        """
        found = MatchSet()
        for strategy in self.strategies:
            if context.cancel_event is not None and context.cancel_event.is_set():
                logger.info(f"Search for '{term}' cancelled before '{strategy.name}'")
                break
            matches = (await strategy.run(context, term)).without(found)
            found.extend(matches)
            if matches:
                logger.info(
                    f"Strategy '{strategy.name}' found {len(matches)} elements for '{term}'"
                )
                return SearchOutcome(term=term, strategy=strategy.name, matches=matches)
            logger.debug(f"Strategy '{strategy.name}' found nothing for '{term}'")
        logger.info(f"No elements found matching: '{term}'")
        return SearchOutcome(term=term)


__all__ = [
    "SearchContext",
    "SearchStrategy",
    "ExactIdStrategy",
    "InstanceTreeStrategy",
    "NativeSearchStrategy",
    "DeepSubstringStrategy",
    "BracketStrippedStrategy",
    "StrategyCascade",
    "default_strategies",
    "parse_node_id",
    "strip_brackets",
    "name_contains",
    "any_property_contains",
]
