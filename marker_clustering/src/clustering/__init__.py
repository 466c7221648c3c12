"""
Marker clustering engine.

This package contains the node arena, the per-level active node sets,
proximity search, the incremental insertion and merge algorithm, and the
materialization and pick resolution that expose cluster state to a renderer.
"""

from .engine import MarkerClusterEngine
from .levels import FINEST_LEVEL, NUMBER_OF_LEVELS, LevelTable
from .materialize import MaterializedMarkers, cluster_scale_factor
from .nodes import NO_MARKER, ClusteringNode, NodeArena
from .picking import PickResult, resolve_pick
from .proximity import find_closest_node, level_scale, projected_threshold

__all__ = [
    "MarkerClusterEngine",
    "ClusteringNode",
    "NodeArena",
    "LevelTable",
    "MaterializedMarkers",
    "PickResult",
    "NO_MARKER",
    "NUMBER_OF_LEVELS",
    "FINEST_LEVEL",
    "cluster_scale_factor",
    "find_closest_node",
    "level_scale",
    "projected_threshold",
    "resolve_pick",
]
