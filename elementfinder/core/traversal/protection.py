"""Limits that bound the cost of a traversal.

A traversal over a large model can run for a long time; these limits let
callers cap the number of oracle calls, stop early once enough matches
are in, enforce a deadline and cancel a running scan from outside.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LimitReached(Exception):
    """Raised inside the engine when a traversal limit stops the walk."""

    def __init__(self, reason: str, details: Dict[str, Any]):
        """Initialize the stop signal.

        Args:
            reason: Stop reason recorded on the traversal result
            details: Counters at the time the limit fired
        """
        self.reason = reason
        self.details = details
        super().__init__(f"Traversal stopped: {reason}")


class TraversalLimits(BaseModel):
    """Configurable bounds for one traversal.

    Attributes:
        max_nodes: Maximum oracle dispatches (0 = unlimited)
        early_exit_min_matches: Matches required for an early exit
        early_exit_min_visited: Nodes resolved before an early exit may fire;
            None disables the early exit
        max_execution_time: Deadline in seconds (0 = none)
        oracle_timeout: Per-call oracle timeout in seconds (0 = none)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    max_nodes: int = Field(default=0, ge=0)
    early_exit_min_matches: int = Field(default=1, ge=1)
    early_exit_min_visited: Optional[int] = Field(default=None, ge=0)
    max_execution_time: float = Field(default=0.0, ge=0.0)
    oracle_timeout: float = Field(default=0.0, ge=0.0)


class TraversalGuard:
    """Runtime state that enforces ``TraversalLimits`` for a single call."""

    def __init__(
        self,
        limits: Optional[TraversalLimits] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.limits = limits or TraversalLimits()
        self._cancel_event = cancel_event
        self._start_time = time.monotonic()
        self.dispatched = 0

    @property
    def elapsed_time(self) -> float:
        return time.monotonic() - self._start_time

    def remaining_dispatches(self) -> Optional[int]:
        """How many more oracle calls are allowed, or None for unlimited."""
        if self.limits.max_nodes <= 0:
            return None
        return max(0, self.limits.max_nodes - self.dispatched)

    def record_dispatch(self, count: int) -> None:
        self.dispatched += count

    def oracle_timeout(self) -> Optional[float]:
        """Timeout for the next oracle call, clipped to the deadline."""
        timeout = self.limits.oracle_timeout or None
        if self.limits.max_execution_time > 0:
            remaining = max(0.0, self.limits.max_execution_time - self.elapsed_time)
            timeout = remaining if timeout is None else min(timeout, remaining)
        return timeout

    def check_batch_boundary(self, matches: int, visited: int) -> None:
        """Check every limit before the next batch is issued.

        Raises:
            LimitReached: If the traversal must stop
        """
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise LimitReached("cancelled", {"visited": visited, "matches": matches})

        limit = self.limits.max_execution_time
        if limit > 0 and self.elapsed_time >= limit:
            raise LimitReached(
                "deadline",
                {"execution_time": self.elapsed_time, "max_execution_time": limit},
            )

        min_visited = self.limits.early_exit_min_visited
        if (
            min_visited is not None
            and matches >= self.limits.early_exit_min_matches
            and visited >= min_visited
        ):
            raise LimitReached(
                "early_exit",
                {"visited": visited, "matches": matches, "min_visited": min_visited},
            )

        remaining = self.remaining_dispatches()
        if remaining is not None and remaining <= 0:
            raise LimitReached(
                "max_nodes",
                {"dispatched": self.dispatched, "max_nodes": self.limits.max_nodes},
            )
