"""Presentation of search results in the viewer.

``activate`` drives the fire-and-forget presenter primitives for a match
set and surfaces the attributes of its first element. Every step replaces
state rather than adding to it, so calling it twice with the same set
leaves the viewer exactly as one call would.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from elementfinder.exceptions import OracleError

from .protocols import RGBA, Presenter, PropertyOracle
from .traversal import fetch_attributes
from .types import NodeAttributes, NodeId

logger = logging.getLogger(__name__)

# Orange with alpha
HIGHLIGHT_COLOR: RGBA = (1.0, 0.5, 0.0, 0.7)


async def activate(
    presenter: Presenter,
    oracle: PropertyOracle,
    node_ids: Iterable[NodeId],
    color: RGBA = HIGHLIGHT_COLOR,
    oracle_timeout: Optional[float] = None,
) -> Optional[NodeAttributes]:
    """Select, frame and tint ``node_ids``, then show the first one's details.

    Args:
        presenter: Viewer presentation primitives
        oracle: Property oracle used for the informational display
        node_ids: Identifiers to activate; empty input is a no-op
        color: RGBA highlight tint
        oracle_timeout: Timeout for the info fetch in seconds

    Returns:
        Attributes shown for the first identifier, or None
    """
    ids: List[NodeId] = list(dict.fromkeys(node_ids))
    if not ids:
        return None

    logger.info(f"Highlighting {len(ids)} elements")
    presenter.clear_selection()
    presenter.select(ids)
    presenter.fit_to_view(ids)
    for node_id in ids:
        presenter.set_theming_color(node_id, color)

    first = ids[0]
    try:
        attrs = await fetch_attributes(oracle, first, oracle_timeout)
    except OracleError as e:
        logger.warning(f"Could not load details for element {first}: {e.message}")
        return None
    if not attrs.known:
        logger.warning(f"Element details unavailable for dbId {first}")
        return None

    logger.info(
        f"Element details for dbId {first}: name={attrs.name or 'N/A'}, "
        f"category={attrs.category or 'N/A'}, external id={attrs.external_id or 'N/A'}"
    )
    presenter.show_element_info(first, attrs)
    return attrs


__all__ = ["activate", "HIGHLIGHT_COLOR"]
