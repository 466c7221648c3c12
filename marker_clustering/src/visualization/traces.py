"""
Trace creation module for the marker map.

This module turns materialized cluster state into Plotly traces:
- One scatter trace for single markers and one for clusters
- Glyph size from the materialized render scale
- Colors from the materialized RGB arrays
- customdata carrying the materialized point index for pick resolution
- Hover text with marker ids and cluster sizes
"""

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import plotly.graph_objs as go

from marker_clustering.utils.colordefinitions import (
    CLUSTER_TYPE,
    MARKER_TYPE,
    rgb_string,
    selection_outline,
    type_names,
)

DEFAULT_MARKER_SIZE = 14.0


class TraceCreator:
    """Handles creation of Plotly traces for materialized markers."""

    # Single markers are drawn as a downward pointer, clusters as discs
    SYMBOLS = {MARKER_TYPE: "triangle-down", CLUSTER_TYPE: "circle"}

    def __init__(self, marker_size: float = DEFAULT_MARKER_SIZE, show_cluster_counts: bool = True):
        """
        Initialize TraceCreator.

        Args:
            marker_size: Glyph size in pixels at render scale 1.0
            show_cluster_counts: Write the marker count on cluster glyphs
        """
        self.marker_size = marker_size
        self.show_cluster_counts = show_cluster_counts

    def create_traces(self, materialized, highlight_indices: Optional[List[int]] = None) -> List:
        """
        Create the marker and cluster traces for one materialization.

        Args:
            materialized: MaterializedMarkers to draw
            highlight_indices: Materialized point indices to outline as selected

        Returns:
            List of two Scattergl traces: single markers, then clusters. Trace
            order defines the curveNumber used by cells_from_selection.
        """
        highlighted = set(highlight_indices or [])
        return [
            self._create_type_trace(materialized, marker_type, highlighted)
            for marker_type in (MARKER_TYPE, CLUSTER_TYPE)
        ]

    def _create_type_trace(self, materialized, marker_type: int, highlighted) -> go.Scattergl:
        indices = materialized.indices_of_type(marker_type)

        x = materialized.positions[indices, 0]
        y = materialized.positions[indices, 1]
        sizes = self.marker_size * materialized.scales[indices]
        colors = [rgb_string(c) for c in materialized.colors[indices]]
        line_widths = [3 if int(i) in highlighted else 1 for i in indices]
        line_colors = [selection_outline if int(i) in highlighted else "white" for i in indices]

        is_cluster = marker_type == CLUSTER_TYPE
        mode = "markers+text" if is_cluster and self.show_cluster_counts else "markers"
        text = [str(int(c)) for c in materialized.marker_counts[indices]] if is_cluster else None

        return go.Scattergl(
            x=x,
            y=y,
            mode=mode,
            name=type_names[marker_type],
            text=text,
            textposition="middle center",
            textfont=dict(color="white", size=10),
            hovertext=self._hover_text(materialized, indices),
            hoverinfo="text",
            customdata=indices.tolist(),  # materialized point index, used for picking
            marker=dict(
                size=sizes,
                color=colors,
                symbol=self.SYMBOLS[marker_type],
                line=dict(width=line_widths, color=line_colors),
                opacity=0.9,
            ),
        )

    def _hover_text(self, materialized, indices: np.ndarray) -> List[str]:
        latitudes = materialized.latitudes[indices]
        longitudes = materialized.longitudes[indices]
        hover = []
        for i, lat, lon in zip(indices, latitudes, longitudes):
            if materialized.marker_counts[i] == 1:
                label = f"Marker {int(materialized.marker_ids[i])}"
            else:
                label = (
                    f"Cluster {int(materialized.node_ids[i])}: "
                    f"{int(materialized.marker_counts[i])} markers"
                )
            hover.append(f"{label}<br>Lat: {lat:.5f}°<br>Lon: {lon:.5f}°")
        return hover

    @staticmethod
    def cells_from_selection(
        selection: Optional[Dict[str, Any]],
    ) -> Tuple[List[Tuple[int, int]], Dict[Tuple[int, int], int]]:
        """
        Convert Dash selectedData / clickData into pick inputs.

        Each selected Plotly point is one rendered cell, identified by its
        (curveNumber, pointNumber) pair. Its customdata holds the materialized
        point index written by create_traces.

        Args:
            selection: Dash selection payload ({'points': [...]}) or None

        Returns:
            Tuple of (cell_ids, cell_to_point) for MarkerClusterEngine.resolve_pick
        """
        cell_ids: List[Tuple[int, int]] = []
        cell_to_point: Dict[Tuple[int, int], int] = {}
        if not selection:
            return cell_ids, cell_to_point

        for point in selection.get("points", []):
            point_number = point.get("pointNumber", point.get("pointIndex"))
            customdata = point.get("customdata")
            if point_number is None or customdata is None:
                continue
            if isinstance(customdata, (list, tuple)):
                if not customdata:
                    continue
                customdata = customdata[0]

            cell_id = (int(point.get("curveNumber", 0)), int(point_number))
            cell_ids.append(cell_id)
            cell_to_point[cell_id] = int(customdata)

        return cell_ids, cell_to_point
