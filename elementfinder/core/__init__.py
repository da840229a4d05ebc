"""Search core: traversal engine, strategy cascade, path resolution and actions."""

from .actions import HIGHLIGHT_COLOR, activate
from .adapters import CallbackPropertyOracle, coerce_attributes
from .path_resolver import PATH_SEPARATOR, get_element_path, resolve_path, split_path
from .property_scan import find_by_property, property_aliases
from .protocols import Presenter, PropertyOracle, TreeAccessor
from .strategies import (
    BracketStrippedStrategy,
    DeepSubstringStrategy,
    ExactIdStrategy,
    InstanceTreeStrategy,
    NativeSearchStrategy,
    SearchContext,
    SearchStrategy,
    StrategyCascade,
    default_strategies,
)
from .traversal import BatchTraversal, TraversalLimits, traverse
from .types import (
    MatchSet,
    NodeAttributes,
    NodeId,
    PathResolution,
    PropertyEntry,
    SearchOutcome,
    TraversalResult,
)

__all__ = [
    # Types
    "NodeId",
    "NodeAttributes",
    "PropertyEntry",
    "MatchSet",
    "TraversalResult",
    "PathResolution",
    "SearchOutcome",
    # Collaborator protocols
    "TreeAccessor",
    "PropertyOracle",
    "Presenter",
    "CallbackPropertyOracle",
    "coerce_attributes",
    # Traversal
    "BatchTraversal",
    "TraversalLimits",
    "traverse",
    # Strategies
    "SearchContext",
    "SearchStrategy",
    "ExactIdStrategy",
    "InstanceTreeStrategy",
    "NativeSearchStrategy",
    "DeepSubstringStrategy",
    "BracketStrippedStrategy",
    "StrategyCascade",
    "default_strategies",
    # Property scan
    "find_by_property",
    "property_aliases",
    # Paths
    "resolve_path",
    "get_element_path",
    "split_path",
    "PATH_SEPARATOR",
    # Actions
    "activate",
    "HIGHLIGHT_COLOR",
]
