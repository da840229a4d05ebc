"""Batched breadth-first traversal over the instance tree.

Nodes are dequeued in fixed-size batches. Every node of a batch is sent to
the property oracle at once and the engine waits for the whole batch to
settle before enqueueing that batch's children, which keeps at most
``batch_size`` oracle calls in flight and preserves breadth-first order.
All traversal state is local to one ``run`` call.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Union

from elementfinder.core.protocols import PropertyOracle, TreeAccessor
from elementfinder.core.types import NodeAttributes, NodeId, TraversalResult
from elementfinder.exceptions import (
    OracleError,
    OracleUnavailableError,
    SearchUnavailableError,
)
from elementfinder.logging.custom_levels import trace

from .protection import LimitReached, TraversalGuard, TraversalLimits
from .queue_manager import TraversalFrontier
from .trail_tracker import VisitTrail

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 20

Predicate = Callable[[NodeAttributes], Union[bool, Awaitable[bool]]]
NodeFilter = Callable[[NodeId], bool]


async def fetch_attributes(
    oracle: PropertyOracle, node_id: NodeId, timeout: Optional[float] = None
) -> NodeAttributes:
    """Fetch attributes for one node, degrading failures to "unknown".

    A timed-out, failed or raising fetch yields ``NodeAttributes.unknown``
    so a single bad node cannot stall or abort a traversal.

    Raises:
        OracleUnavailableError: If the host runtime is gone
    """
    try:
        if timeout is None:
            return await oracle.get_properties(node_id)
        return await asyncio.wait_for(oracle.get_properties(node_id), timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Property fetch timed out for node {node_id} after {timeout}s")
    except OracleUnavailableError:
        raise
    except OracleError as e:
        logger.warning(f"Property fetch failed for node {node_id}: {e.message}")
    except Exception as e:
        logger.warning(f"Property fetch raised for node {node_id}: {e}", exc_info=True)
    return NodeAttributes.unknown(node_id)


class BatchTraversal:
    """Breadth-first walker that resolves attributes in bounded batches.

    Attributes:
        tree: Instance tree accessor of the loaded model
        oracle: Awaitable property oracle
        batch_size: Maximum oracle calls issued per batch
    """

    def __init__(
        self,
        tree: Optional[TreeAccessor],
        oracle: PropertyOracle,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.tree = tree
        self.oracle = oracle
        self.batch_size = batch_size

    async def run(
        self,
        root_id: Optional[NodeId],
        predicate: Predicate,
        limits: Optional[TraversalLimits] = None,
        cancel_event: Optional[asyncio.Event] = None,
        node_filter: Optional[NodeFilter] = None,
        include_root: bool = True,
    ) -> TraversalResult:
        """Walk the subtree under ``root_id`` collecting predicate matches.

        Args:
            root_id: Traversal root; None means no model is loaded
            predicate: Sync or async test applied to resolved attributes
            limits: Optional caps (node count, early exit, deadline, timeouts)
            cancel_event: Set from outside to stop at the next batch boundary
            node_filter: Decides which nodes are sent to the oracle; rejected
                nodes are still expanded
            include_root: When False only strict descendants are tested

        Returns:
            TraversalResult with matches in discovery order

        Raises:
            SearchUnavailableError: If the oracle's host runtime is gone
        """
        result = TraversalResult()
        if self.tree is None or root_id is None:
            result.stop_reason = "unavailable"
            return result

        guard = TraversalGuard(limits, cancel_event)
        frontier = TraversalFrontier()
        trail = VisitTrail()
        depths: Dict[NodeId, int] = {root_id: 0}
        frontier.push(root_id)

        try:
            while frontier:
                guard.check_batch_boundary(len(result.matches), trail.length)
                batch = frontier.take_batch(self.batch_size)
                dispatch = [
                    node_id
                    for node_id in batch
                    if self._should_dispatch(node_id, root_id, include_root, node_filter)
                ]
                remaining = guard.remaining_dispatches()
                if remaining is not None and len(dispatch) > remaining:
                    dispatch = dispatch[:remaining]

                if dispatch:
                    guard.record_dispatch(len(dispatch))
                    attributes = await self._resolve_batch(dispatch, guard)
                    for node_id, attrs in zip(dispatch, attributes):
                        matched = await self._evaluate(predicate, attrs)
                        trail.record_step(node_id, depths[node_id])
                        if matched and result.matches.add(node_id):
                            trace(logger, f"Match: '{attrs.name}' (dbId: {node_id})")

                # Children are enqueued only after the whole batch settled
                for node_id in batch:
                    self._expand(node_id, depths, frontier)
        except LimitReached as stop:
            result.stop_reason = stop.reason
            logger.debug(f"Traversal from {root_id} stopped: {stop.reason} {stop.details}")

        result.visited = trail.length
        result.oracle_calls = guard.dispatched
        result.trail = trail.node_ids()
        result.depths = trail.depths()
        logger.debug(
            f"Traversal from {root_id} complete, found {len(result.matches)} matches "
            f"in {result.visited} nodes ({result.stop_reason})"
        )
        return result

    def _should_dispatch(
        self,
        node_id: NodeId,
        root_id: NodeId,
        include_root: bool,
        node_filter: Optional[NodeFilter],
    ) -> bool:
        if node_id == root_id and not include_root:
            return False
        if node_filter is not None and not node_filter(node_id):
            return False
        return True

    def _expand(
        self, node_id: NodeId, depths: Dict[NodeId, int], frontier: TraversalFrontier
    ) -> None:
        child_depth = depths[node_id] + 1

        def visit(child_id: NodeId) -> None:
            if frontier.push(child_id):
                depths[child_id] = child_depth

        self.tree.enum_node_children(node_id, visit)

    async def _resolve_batch(
        self, batch: List[NodeId], guard: TraversalGuard
    ) -> List[NodeAttributes]:
        timeout = guard.oracle_timeout()
        outcomes = await asyncio.gather(
            *(self._fetch(node_id, timeout) for node_id in batch),
            return_exceptions=True,
        )
        resolved: List[NodeAttributes] = []
        for node_id, outcome in zip(batch, outcomes):
            if isinstance(outcome, OracleUnavailableError):
                raise SearchUnavailableError(details={"node_id": node_id}) from outcome
            if isinstance(outcome, BaseException):
                raise outcome
            resolved.append(outcome)
        return resolved

    async def _fetch(self, node_id: NodeId, timeout: Optional[float]) -> NodeAttributes:
        return await fetch_attributes(self.oracle, node_id, timeout)

    async def _evaluate(self, predicate: Predicate, attrs: NodeAttributes) -> bool:
        if not attrs.known:
            return False
        try:
            verdict = predicate(attrs)
            if inspect.isawaitable(verdict):
                verdict = await verdict
        except Exception as e:
            logger.warning(f"Predicate failed for node {attrs.dbid}: {e}", exc_info=True)
            return False
        return bool(verdict)


async def traverse(
    tree: Optional[TreeAccessor],
    oracle: PropertyOracle,
    root_id: Optional[NodeId],
    predicate: Predicate,
    batch_size: int = DEFAULT_BATCH_SIZE,
    **options,
) -> TraversalResult:
    """Run a single ``BatchTraversal`` from ``root_id``.

    Keyword options are passed to ``BatchTraversal.run``.
    """
    return await BatchTraversal(tree, oracle, batch_size).run(root_id, predicate, **options)
