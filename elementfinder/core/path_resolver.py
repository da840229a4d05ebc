"""Hierarchical path resolution in both directions.

``resolve_path`` walks a slash-delimited path down the instance tree,
fanning out over every candidate that matched the previous segment.
``get_element_path`` renders the ancestor chain of a node.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .strategies import SearchContext
from .types import MatchSet, NodeId, PathResolution

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " / "


def split_path(path: str) -> List[str]:
    """Split on ``/``, trimming and dropping empty segments."""
    return [segment.strip() for segment in path.split("/") if segment.strip()]


def _name_only(term: str):
    needle = term.lower()
    return lambda attrs: needle in attrs.name.lower()


async def find_named_descendants(
    context: SearchContext, parent_id: NodeId, name: str, include_root: bool = False
) -> MatchSet:
    """Nodes under ``parent_id`` whose name contains ``name`` (case-insensitive)."""
    result = await context.traversal().run(
        parent_id,
        _name_only(name),
        limits=context.limits(),
        cancel_event=context.cancel_event,
        include_root=include_root,
    )
    return result.matches


async def resolve_path(context: SearchContext, path: str) -> PathResolution:
    """Resolve ``path`` segment by segment.

    Segment 0 is matched against the whole tree. Every candidate of segment
    ``i`` becomes a search root for segment ``i + 1``; the deduplicated union
    of their matches is the next candidate set. An empty union stops the
    walk and the candidates found so far are returned.

    Returns:
        PathResolution; check ``complete`` to tell a full match from a
        partial one
    """
    segments = split_path(path)
    resolution = PathResolution(path=path, segments=segments)
    root_id = context.root_id
    if not segments:
        logger.warning("Empty path provided")
        return resolution
    if root_id is None:
        return resolution

    logger.debug(f"Path segments: {segments}")
    candidates = await find_named_descendants(context, root_id, segments[0], include_root=True)
    logger.debug(f"Found {len(candidates)} matches for first segment '{segments[0]}'")
    if not candidates:
        return resolution
    resolution.matches = candidates
    resolution.resolved_depth = 1

    for segment in segments[1:]:
        next_candidates = MatchSet()
        for candidate in candidates:
            next_candidates.extend(await find_named_descendants(context, candidate, segment))
        if not next_candidates:
            logger.warning(f"No matches found for segment '{segment}'")
            break
        logger.debug(f"Found {len(next_candidates)} matches for segment '{segment}'")
        candidates = next_candidates
        resolution.matches = candidates
        resolution.resolved_depth += 1

    return resolution


async def get_element_path(context: SearchContext, node_id: NodeId) -> Optional[str]:
    """Render the ancestor chain of ``node_id`` root-first.

    Unnamed nodes appear as ``[id]``. Returns None when no model is loaded.
    """
    if context.tree is None or context.root_id is None:
        return None

    names: List[str] = []
    seen = set()
    current = node_id
    while True:
        seen.add(current)
        attrs = await context.fetch(current)
        names.append(attrs.name or f"[{current}]")
        parent_id = context.tree.get_parent_id(current)
        if not parent_id or parent_id == current or parent_id in seen:
            break
        current = parent_id

    names.reverse()
    return PATH_SEPARATOR.join(names)


__all__ = [
    "resolve_path",
    "get_element_path",
    "find_named_descendants",
    "split_path",
    "PATH_SEPARATOR",
]
