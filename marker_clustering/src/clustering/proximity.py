"""
Nearest-neighbour search within one detail level.

The cluster distance is given in screen pixels. At level 0 one 256 px tile
spans 360 degrees of longitude, and every finer level doubles the pixel
resolution, so the same pixel radius covers half as much projected distance
per level:

    scale(level) = (360 / 256) / 2**level      degrees per pixel

Search is a linear scan of the level's active nodes using squared planar
distance in projected coordinates.
"""

from typing import Optional

from .levels import LevelTable
from .nodes import ClusteringNode, NodeArena

TILE_SIZE_PX = 256
DEFAULT_DISTANCE_THRESHOLD = 80.0
LEVEL0_SCALE = 360.0 / TILE_SIZE_PX


def level_scale(level: int) -> float:
    """Projected degrees per screen pixel at a detail level."""
    return LEVEL0_SCALE / float(1 << level)


def projected_threshold(distance_px: float, level: int) -> float:
    """Convert a pixel distance into projected-coordinate units at a level."""
    return level_scale(level) * distance_px


def find_closest_node(
    arena: NodeArena,
    levels: LevelTable,
    node: ClusteringNode,
    level: int,
    distance_px: float = DEFAULT_DISTANCE_THRESHOLD,
) -> Optional[ClusteringNode]:
    """
    Find the active node at ``level`` closest to ``node``.

    Args:
        arena: Node arena resolving ids
        levels: Level table holding the active sets
        node: Probe node (may live at a different level)
        level: Level whose active set is scanned
        distance_px: Search radius in screen pixels

    Returns:
        The nearest other node strictly inside the radius, or None. Exact
        ties keep the first node encountered in the scan.
    """
    threshold = projected_threshold(distance_px, level)
    closest_distance2 = threshold * threshold
    closest = None

    for other_id in levels.node_ids(level):
        if other_id == node.node_id:
            continue
        other = arena.get(other_id)
        if other is None:
            print(f"⚠️  Warning: Level {level} references deleted node {other_id}")
            continue

        dx = other.x - node.x
        dy = other.y - node.y
        d2 = dx * dx + dy * dy
        if d2 < closest_distance2:
            closest = other
            closest_distance2 = d2

    return closest
