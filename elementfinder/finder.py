"""Element finder facade.

``ElementFinder`` is the entry point a UI layer talks to. It bundles the
instance tree, the property oracle and the presenter of one viewer and
exposes lookups by name, property value and hierarchical path. Host
runtimes build one with ``create_element_finder`` and hand it to their own
extension or plugin mechanism.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence
from urllib.parse import unquote

from elementfinder.config import SearchConfig, get_search_config
from elementfinder.core import (
    MatchSet,
    NodeAttributes,
    NodeId,
    PathResolution,
    Presenter,
    PropertyOracle,
    SearchContext,
    SearchOutcome,
    SearchStrategy,
    StrategyCascade,
    TreeAccessor,
    activate,
    default_strategies,
    find_by_property,
    get_element_path,
    resolve_path,
)
from elementfinder.exceptions import OracleUnavailableError, SearchUnavailableError
from elementfinder.logging import configure_logging

logger = logging.getLogger(__name__)


def decode_term(raw: str) -> str:
    """Percent-decode a term or path that arrived URL-encoded.

    Inputs that do not decode cleanly are returned unchanged.
    """
    if "%" not in raw:
        return raw
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        logger.debug(f"Could not decode '{raw}', using it literally")
        return raw


class ElementFinder:
    """Locate scene elements and highlight them in the viewer.

    Every entry point treats a missing model as "nothing to search" and
    returns an empty result. ``SearchUnavailableError`` is raised only when
    the host runtime behind the oracle is gone.
    """

    def __init__(
        self,
        tree: Optional[TreeAccessor],
        oracle: PropertyOracle,
        presenter: Optional[Presenter] = None,
        config: Optional[SearchConfig] = None,
        strategies: Optional[Sequence[SearchStrategy]] = None,
    ) -> None:
        self.tree = tree
        self.oracle = oracle
        self.presenter = presenter
        self.config = config or get_search_config()
        if self.config.debug:
            configure_logging(debug=True)
        self.cascade = StrategyCascade(
            strategies if strategies is not None else default_strategies(self.config)
        )

    def _context(self, cancel_event: Optional[asyncio.Event] = None) -> SearchContext:
        return SearchContext(self.tree, self.oracle, self.config, cancel_event)

    @property
    def model_loaded(self) -> bool:
        return self.tree is not None and self.tree.get_root_id() is not None

    # ----------------- LOOKUPS -----------------

    async def search(
        self, term: str, cancel_event: Optional[asyncio.Event] = None
    ) -> SearchOutcome:
        """Run the strategy cascade for ``term``.

        Args:
            term: Node id, name fragment or property text (may be URL-encoded)
            cancel_event: Set to abort long scans at the next batch boundary

        Raises:
            SearchUnavailableError: If the host runtime is gone
        """
        term = decode_term(term)
        logger.info(f"Searching for element containing: '{term}'")
        if not self.model_loaded:
            logger.warning("Model not available")
            return SearchOutcome(term=term)
        try:
            return await self.cascade.run(self._context(cancel_event), term)
        except OracleUnavailableError as e:
            raise SearchUnavailableError(details=e.details) from e

    async def find_element_by_name(
        self, term: str, cancel_event: Optional[asyncio.Event] = None
    ) -> List[NodeId]:
        """Identifiers matching ``term`` via the first successful strategy."""
        outcome = await self.search(term, cancel_event)
        return outcome.matches.to_list()

    async def find_elements_by_property(
        self,
        property_name: str,
        value: str,
        aliases: Optional[Sequence[str]] = None,
        exhaustive: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[NodeId]:
        """Identifiers whose ``property_name`` (or an alias) equals ``value``.

        Set ``exhaustive`` to scan the whole model instead of stopping once
        matches exist and enough nodes were checked.
        """
        property_name = decode_term(property_name)
        value = decode_term(value)
        try:
            matches = await find_by_property(
                self._context(cancel_event),
                property_name,
                value,
                aliases=aliases,
                exhaustive=exhaustive,
            )
        except OracleUnavailableError as e:
            raise SearchUnavailableError(details=e.details) from e
        return matches.to_list()

    async def resolve_path_detailed(
        self, path: str, cancel_event: Optional[asyncio.Event] = None
    ) -> PathResolution:
        """Resolve ``path`` and report how many segments matched."""
        path = decode_term(path)
        logger.info(f"Finding element by path: {path}")
        try:
            return await resolve_path(self._context(cancel_event), path)
        except OracleUnavailableError as e:
            raise SearchUnavailableError(details=e.details) from e

    async def resolve_path(
        self, path: str, cancel_event: Optional[asyncio.Event] = None
    ) -> List[NodeId]:
        """Best-effort identifiers for ``path``; see ``resolve_path_detailed``."""
        resolution = await self.resolve_path_detailed(path, cancel_event)
        return resolution.matches.to_list()

    async def get_element_path(self, node_id: NodeId) -> Optional[str]:
        """Ancestor names of ``node_id`` joined root-first with ``" / "``."""
        try:
            return await get_element_path(self._context(), node_id)
        except OracleUnavailableError as e:
            raise SearchUnavailableError(details=e.details) from e

    # ----------------- ACTIONS -----------------

    async def highlight(self, node_ids: Iterable[NodeId]) -> Optional[NodeAttributes]:
        """Select, frame and tint ``node_ids`` in the viewer."""
        if self.presenter is None:
            logger.debug("No presenter attached, skipping highlight")
            return None
        return await activate(
            self.presenter,
            self.oracle,
            node_ids,
            oracle_timeout=self.config.oracle_timeout or None,
        )

    async def search_and_highlight(
        self, term: str, cancel_event: Optional[asyncio.Event] = None
    ) -> SearchOutcome:
        """Search for ``term`` and highlight whatever was found."""
        outcome = await self.search(term, cancel_event)
        if outcome.found:
            await self.highlight(outcome.matches)
        else:
            logger.warning(outcome.message)
        return outcome

    async def highlight_by_property(
        self, property_name: str, value: str, exhaustive: bool = False
    ) -> MatchSet:
        """Find elements by property value and highlight them."""
        matches = MatchSet(
            await self.find_elements_by_property(property_name, value, exhaustive=exhaustive)
        )
        if matches:
            await self.highlight(matches)
        else:
            logger.info(f"No elements found with {property_name}: '{value}'")
        return matches


def create_element_finder(
    tree: Optional[TreeAccessor],
    oracle: PropertyOracle,
    presenter: Optional[Presenter] = None,
    config: Optional[SearchConfig] = None,
    strategies: Optional[Sequence[SearchStrategy]] = None,
) -> ElementFinder:
    """Build an ``ElementFinder`` for one viewer.

    Args:
        tree: Instance tree accessor (None when no model is loaded)
        oracle: Awaitable property oracle
        presenter: Optional presentation primitives for highlighting
        config: Search configuration (defaults to the environment)
        strategies: Custom cascade order (defaults to the standard order)
    """
    finder = ElementFinder(tree, oracle, presenter, config, strategies)
    logger.debug(
        f"ElementFinder created with strategies {[s.name for s in finder.cascade.strategies]}"
    )
    return finder


__all__ = ["ElementFinder", "create_element_finder", "decode_term"]
