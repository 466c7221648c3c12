"""
Render-ready projection of one level's active nodes.

A MaterializedMarkers instance is a set of index-aligned numpy arrays: entry i
of every array describes the same rendered point. The node ids are kept so
that later selections on the rendered geometry can be mapped back to markers
or clusters.
"""

from typing import Iterable

import numpy as np
import pandas as pd

from marker_clustering.utils.colordefinitions import CLUSTER_TYPE, MARKER_TYPE, type_colors
from marker_clustering.utils.mercator import y2lat_array

from .nodes import ClusteringNode

DEFAULT_MAX_CLUSTER_SCALE_FACTOR = 2.0


def cluster_scale_factor(marker_count, max_scale_factor: float = DEFAULT_MAX_CLUSTER_SCALE_FACTOR):
    """
    Glyph scale for a cluster of ``marker_count`` markers.

    Uses y = k*x^2 / (x^2 + b) with b = 4k - 4, so a two-marker cluster renders
    at scale 1.0 and the scale approaches k as the cluster grows. Accepts
    scalars or numpy arrays.
    """
    k = float(max_scale_factor)
    b = 4.0 * k - 4.0
    x2 = np.square(np.asarray(marker_count, dtype=np.float64))
    scale = k * x2 / (x2 + b)
    if np.ndim(scale) == 0:
        return float(scale)
    return scale


class MaterializedMarkers:
    """Index-aligned arrays describing the markers to draw at one zoom level."""

    def __init__(self, zoom_level: int, positions: np.ndarray, types: np.ndarray,
                 colors: np.ndarray, scales: np.ndarray, node_ids: np.ndarray,
                 marker_ids: np.ndarray, marker_counts: np.ndarray):
        self.zoom_level = zoom_level
        self.positions = positions
        self.types = types
        self.colors = colors
        self.scales = scales
        self.node_ids = node_ids
        self.marker_ids = marker_ids
        self.marker_counts = marker_counts

    @classmethod
    def empty(cls, zoom_level: int = 0) -> "MaterializedMarkers":
        return cls.from_nodes([], zoom_level)

    @classmethod
    def from_nodes(cls, nodes: Iterable[ClusteringNode], zoom_level: int,
                   max_scale_factor: float = DEFAULT_MAX_CLUSTER_SCALE_FACTOR) -> "MaterializedMarkers":
        """
        Build the arrays for a sequence of nodes, preserving their order.

        Args:
            nodes: Active nodes of the level being drawn
            zoom_level: Level the nodes were taken from
            max_scale_factor: Asymptotic glyph scale for large clusters

        Returns:
            MaterializedMarkers with one entry per node
        """
        nodes = list(nodes)
        n = len(nodes)

        positions = np.array([(node.x, node.y) for node in nodes], dtype=np.float64).reshape(n, 2)
        marker_counts = np.array([node.marker_count for node in nodes], dtype=np.int64)
        node_ids = np.array([node.node_id for node in nodes], dtype=np.int64)
        marker_ids = np.array([node.marker_id for node in nodes], dtype=np.int64)

        is_cluster = marker_counts > 1
        types = np.where(is_cluster, CLUSTER_TYPE, MARKER_TYPE).astype(np.uint8)

        colors = np.empty((n, 3), dtype=np.uint8)
        colors[~is_cluster] = type_colors[MARKER_TYPE]
        colors[is_cluster] = type_colors[CLUSTER_TYPE]

        scales = np.ones(n, dtype=np.float64)
        if is_cluster.any():
            scales[is_cluster] = cluster_scale_factor(marker_counts[is_cluster], max_scale_factor)

        return cls(zoom_level, positions, types, colors, scales, node_ids, marker_ids, marker_counts)

    def __len__(self) -> int:
        return len(self.node_ids)

    @property
    def latitudes(self) -> np.ndarray:
        return y2lat_array(self.positions[:, 1])

    @property
    def longitudes(self) -> np.ndarray:
        return self.positions[:, 0]

    def indices_of_type(self, marker_type: int) -> np.ndarray:
        """Materialized point indices carrying the given type tag."""
        return np.flatnonzero(self.types == marker_type)

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view of the materialized arrays, one row per rendered point."""
        return pd.DataFrame(
            {
                "x": self.positions[:, 0],
                "y": self.positions[:, 1],
                "latitude": self.latitudes,
                "longitude": self.longitudes,
                "type": self.types,
                "r": self.colors[:, 0],
                "g": self.colors[:, 1],
                "b": self.colors[:, 2],
                "scale": self.scales,
                "node_id": self.node_ids,
                "marker_id": self.marker_ids,
                "marker_count": self.marker_counts,
            }
        )

    def __repr__(self):
        n_clusters = int(np.count_nonzero(self.types == CLUSTER_TYPE))
        return (
            f"<MaterializedMarkers level {self.zoom_level}: "
            f"{len(self) - n_clusters} marker(s), {n_clusters} cluster(s)>"
        )
