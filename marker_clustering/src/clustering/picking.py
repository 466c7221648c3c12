"""
Map selections on rendered geometry back to markers and clusters.

The renderer reports which of its geometry cells were selected together with
a lookup from cell id to the materialized point index that produced the cell.
Several cells can belong to one rendered glyph, so each materialized point is
reported at most once.
"""

from typing import Any, Iterable, List, Optional

from .materialize import MaterializedMarkers


class PickResult:
    """Marker ids and cluster node ids resolved from one selection."""

    def __init__(self, marker_ids: Optional[List[int]] = None, cluster_ids: Optional[List[int]] = None):
        self.marker_ids = marker_ids if marker_ids is not None else []
        self.cluster_ids = cluster_ids if cluster_ids is not None else []

    def __bool__(self):
        return bool(self.marker_ids or self.cluster_ids)

    def __eq__(self, other):
        if not isinstance(other, PickResult):
            return NotImplemented
        return self.marker_ids == other.marker_ids and self.cluster_ids == other.cluster_ids

    def __repr__(self):
        return f"<PickResult markers={self.marker_ids} clusters={self.cluster_ids}>"


def _lookup_point(cell_to_point: Any, cell_id: Any) -> Optional[int]:
    try:
        return int(cell_to_point[cell_id])
    except (KeyError, IndexError, TypeError, ValueError):
        return None


def resolve_pick(
    cell_ids: Iterable[Any],
    cell_to_point: Any,
    materialized: Optional[MaterializedMarkers],
) -> PickResult:
    """
    Resolve selected geometry cells to marker ids and cluster ids.

    Args:
        cell_ids: Selected rendered-geometry cell ids
        cell_to_point: Mapping or sequence from cell id to materialized point index
        materialized: Most recent materialization, or None if nothing was drawn yet

    Returns:
        PickResult with the original marker id for single-marker points and the
        node id for cluster points, each in first-selected order
    """
    result = PickResult()
    if materialized is None or len(materialized) == 0:
        return result

    seen = set()
    n_points = len(materialized)
    for cell_id in cell_ids:
        point_index = _lookup_point(cell_to_point, cell_id)
        if point_index is None or point_index < 0 or point_index >= n_points:
            print(f"⚠️  Warning: Selected cell {cell_id!r} does not map to a rendered marker")
            continue
        if point_index in seen:
            continue
        seen.add(point_index)

        if materialized.marker_counts[point_index] == 1:
            result.marker_ids.append(int(materialized.marker_ids[point_index]))
        else:
            result.cluster_ids.append(int(materialized.node_ids[point_index]))

    return result
