"""Exact-value scan over a custom property.

Export pipelines label the same logical property in slightly different
ways ("PTP_Assembly_Name", "PTP Assembly Name", "PTPAssemblyName"), so a
scan matches any of a small set of display-name aliases.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .strategies import SearchContext
from .types import MatchSet, NodeAttributes

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s_]+")


def property_aliases(
    property_name: str, extra: Optional[Dict[str, List[str]]] = None
) -> List[str]:
    """Display-name variants of ``property_name``.

    The canonical name comes first, followed by its underscore, spaced and
    joined spellings and any configured extras.
    """
    name = property_name.strip()
    parts = [p for p in _SEPARATORS.split(name) if p]
    variants = [name, "_".join(parts), " ".join(parts), "".join(parts)]
    if extra:
        variants.extend(extra.get(name, []))
    aliases: List[str] = []
    for variant in variants:
        if variant and variant not in aliases:
            aliases.append(variant)
    return aliases


def property_equals(aliases: Iterable[str], value: str) -> Callable[[NodeAttributes], bool]:
    """Predicate: a property named by one of ``aliases`` equals ``value`` exactly."""
    names = tuple(aliases)

    def predicate(attrs: NodeAttributes) -> bool:
        for prop in attrs.properties:
            if prop.display_name in names and prop.value_text == value:
                return True
        return False

    return predicate


async def find_by_property(
    context: SearchContext,
    property_name: str,
    value: str,
    aliases: Optional[Sequence[str]] = None,
    batch_size: Optional[int] = None,
    early_exit_min_visited: Optional[int] = None,
    exhaustive: bool = False,
) -> MatchSet:
    """Scan every node below the root for an exact property value.

    Args:
        context: Search context with the tree, oracle and configuration
        property_name: Canonical property display name
        value: Exact display value to match (case-sensitive)
        aliases: Display names to accept instead of the generated variants
        batch_size: Oracle calls per batch (default from configuration)
        early_exit_min_visited: Scanned-node floor after which the first
            matches end the scan (default from configuration)
        exhaustive: Disable the early exit and scan the whole tree

    Returns:
        MatchSet of matching node identifiers
    """
    root_id = context.root_id
    if root_id is None or not property_name.strip():
        return MatchSet()

    names = list(aliases) if aliases else property_aliases(
        property_name, context.config.property_aliases
    )
    min_visited = None
    if not exhaustive:
        min_visited = (
            early_exit_min_visited
            if early_exit_min_visited is not None
            else context.config.property_early_exit_min_visited
        )
    logger.info(f"Searching for elements with {property_name}: '{value}'")

    result = await context.traversal(batch_size or context.config.property_batch_size).run(
        root_id,
        property_equals(names, value),
        limits=context.limits(early_exit_min_visited=min_visited),
        cancel_event=context.cancel_event,
        include_root=False,
    )
    if result.stop_reason == "early_exit":
        logger.info(
            f"Found {len(result.matches)} matches after {result.visited} nodes, "
            "stopping further search"
        )
    logger.info(f"Found {len(result.matches)} elements with {property_name}: '{value}'")
    return result.matches


__all__ = ["find_by_property", "property_aliases", "property_equals"]
