"""
elementfinder - Locate elements in large 3D-model scene graphs.

elementfinder searches the instance tree of a loaded model by node id,
name, property value or hierarchical path, then selects and highlights
what it found. Attribute lookups go through an asynchronous property
oracle and are issued in bounded batches so the host viewer stays
responsive on models with very large element counts.

Main Exports:
    Facade:
        - ElementFinder: Search, resolve and highlight entry points
        - create_element_finder: Build a finder for one viewer

    Configuration:
        - SearchConfig: Batch sizes, scan caps and timeouts
        - get_search_config: Process default configuration

    Core:
        - MatchSet: Ordered, duplicate-free node identifiers
        - NodeAttributes: Resolved attributes of one node
        - BatchTraversal / traverse: Batched breadth-first walks
        - StrategyCascade: Ordered search strategies

    Collaborators:
        - SceneGraph: In-memory scene for examples and tests
        - CallbackPropertyOracle: Awaitable adapter for callback host APIs

Example:
    >>> from elementfinder import SceneGraph, create_element_finder
    >>>
    >>> scene = SceneGraph()
    >>> root = scene.add_root("Model")
    >>> beam = scene.add_node(root, "Beam-1")
    >>> finder = create_element_finder(scene, scene, scene)
    >>> ids = await finder.find_element_by_name("beam")
"""

__version__ = "0.1.0"

from . import exceptions
from .config import SearchConfig, get_search_config, set_search_config
from .core import (
    BatchTraversal,
    CallbackPropertyOracle,
    MatchSet,
    NodeAttributes,
    PathResolution,
    PropertyEntry,
    SearchOutcome,
    StrategyCascade,
    TraversalLimits,
    TraversalResult,
    traverse,
)
from .finder import ElementFinder, create_element_finder, decode_term
from .logging import configure_logging
from .scene import SceneGraph, SceneNode

__all__ = [
    "__version__",
    # Facade
    "ElementFinder",
    "create_element_finder",
    "decode_term",
    # Configuration
    "SearchConfig",
    "get_search_config",
    "set_search_config",
    "configure_logging",
    # Core
    "MatchSet",
    "NodeAttributes",
    "PropertyEntry",
    "PathResolution",
    "SearchOutcome",
    "TraversalResult",
    "TraversalLimits",
    "BatchTraversal",
    "traverse",
    "StrategyCascade",
    # Collaborators
    "SceneGraph",
    "SceneNode",
    "CallbackPropertyOracle",
    # Modules
    "exceptions",
]
