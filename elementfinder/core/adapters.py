"""Adapters from callback-style host APIs to the awaitable oracle protocol.

Viewer runtimes expose ``getProperties(dbId, onSuccess, onError)`` and
``search(text, onSuccess, onError, attributeNames)``. ``CallbackPropertyOracle``
resolves an ``asyncio.Future`` from those callbacks so the traversal engine
can ``await`` each fetch and join a whole batch with ``asyncio.gather``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from elementfinder.exceptions import OracleError, OracleUnavailableError

from .types import NodeAttributes, NodeId

logger = logging.getLogger(__name__)

GetPropertiesFn = Callable[[NodeId, Callable[[Any], None], Callable[[Any], None]], None]
SearchFn = Callable[
    [str, Callable[[Any], None], Callable[[Any], None], Optional[List[str]]], None
]


def coerce_attributes(node_id: NodeId, payload: Any) -> NodeAttributes:
    """Validate a raw property payload into ``NodeAttributes``.

    Args:
        node_id: Identifier the payload was requested for
        payload: Mapping in the viewer's camelCase shape, or NodeAttributes

    Raises:
        OracleError: If the payload cannot be interpreted
    """
    if isinstance(payload, NodeAttributes):
        return payload
    if not isinstance(payload, Mapping):
        raise OracleError(
            f"Unexpected property payload for node {node_id}",
            node_id=node_id,
            details={"payload_type": type(payload).__name__},
        )
    data: Dict[str, Any] = dict(payload)
    data.setdefault("dbId", node_id)
    for key in ("name", "externalId", "category"):
        if data.get(key) is None:
            data[key] = ""
    try:
        return NodeAttributes.model_validate(data)
    except ValidationError as e:
        raise OracleError(
            f"Malformed property payload for node {node_id}",
            node_id=node_id,
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


class CallbackPropertyOracle:
    """Awaitable property oracle over callback-based host functions.

    Callbacks may fire from any thread; results are marshalled back onto the
    event loop that issued the request.
    """

    def __init__(
        self,
        get_properties: GetPropertiesFn,
        search: Optional[SearchFn] = None,
        is_available: Optional[Callable[[], bool]] = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            get_properties: Host function ``(dbId, on_success, on_error)``
            search: Optional host function ``(text, on_success, on_error, fields)``
            is_available: Optional probe; when it returns False every call
                raises OracleUnavailableError
        """
        self._get_properties = get_properties
        self._search = search
        self._is_available = is_available

    def _check_available(self) -> None:
        if self._is_available is not None and not self._is_available():
            raise OracleUnavailableError("Viewer runtime is not available")

    def _bridge(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future):
        def resolve(value: Any) -> None:
            if not future.done():
                future.set_result(value)

        def reject(error: Any) -> None:
            if future.done():
                return
            if not isinstance(error, OracleError):
                error = OracleError(str(error), details={"cause": repr(error)})
            future.set_exception(error)

        def on_success(value: Any = None) -> None:
            loop.call_soon_threadsafe(resolve, value)

        def on_error(error: Any = None) -> None:
            loop.call_soon_threadsafe(reject, error)

        return on_success, on_error

    async def get_properties(self, node_id: NodeId) -> NodeAttributes:
        self._check_available()
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        on_success, on_error = self._bridge(loop, future)
        try:
            self._get_properties(node_id, on_success, on_error)
        except OracleError:
            raise
        except Exception as e:
            raise OracleError(
                f"getProperties failed for node {node_id}: {e}", node_id=node_id
            ) from e

        try:
            payload = await future
        except OracleError as e:
            if e.node_id is None:
                e.node_id = node_id
                e.details.setdefault("node_id", node_id)
            raise
        return coerce_attributes(node_id, payload)

    async def native_search(
        self, term: str, attribute_names: Optional[Sequence[str]] = None
    ) -> List[NodeId]:
        self._check_available()
        if self._search is None:
            logger.debug("Host runtime exposes no native search")
            return []
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        on_success, on_error = self._bridge(loop, future)
        fields = list(attribute_names) if attribute_names else None
        try:
            self._search(term, on_success, on_error, fields)
        except Exception as e:
            raise OracleError(f"Native search failed for '{term}': {e}") from e
        ids = await future
        return [int(i) for i in (ids or [])]


__all__ = ["CallbackPropertyOracle", "coerce_attributes"]
