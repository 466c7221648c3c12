"""
Tests for trace creation functionality.

Tests the TraceCreator class for marker and cluster trace generation and
for converting Dash selections back into pick inputs.
"""

import unittest

import numpy as np
import plotly.graph_objs as go

from marker_clustering.src.clustering import MarkerClusterEngine
from marker_clustering.src.visualization.traces import TraceCreator


class TestTraceCreator(unittest.TestCase):
    """Test cases for TraceCreator class"""

    def setUp(self):
        """Set up test fixtures"""
        self.trace_creator = TraceCreator(marker_size=10.0)

        self.engine = MarkerClusterEngine()
        self.engine.add_marker(0.0, 0.0)
        self.engine.add_marker(0.0001, 0.0001)
        self.engine.add_marker(45.0, -122.0)
        self.materialized = self.engine.materialize(0)

    def test_creates_marker_and_cluster_traces(self):
        """Test trace order and point split"""
        traces = self.trace_creator.create_traces(self.materialized)

        self.assertEqual(len(traces), 2)
        self.assertTrue(all(isinstance(trace, go.Scattergl) for trace in traces))
        self.assertEqual(traces[0].name, "Markers")
        self.assertEqual(traces[1].name, "Clusters")
        self.assertEqual(len(traces[0].x), 1)
        self.assertEqual(len(traces[1].x), 1)

    def test_customdata_holds_materialized_indices(self):
        traces = self.trace_creator.create_traces(self.materialized)
        indices = sorted(list(traces[0].customdata) + list(traces[1].customdata))
        self.assertEqual(indices, [0, 1])

    def test_sizes_follow_scale(self):
        traces = self.trace_creator.create_traces(self.materialized)
        cluster_index = traces[1].customdata[0]
        expected = 10.0 * self.materialized.scales[cluster_index]
        self.assertAlmostEqual(float(traces[1].marker.size[0]), float(expected))
        self.assertEqual(traces[0].marker.symbol, "triangle-down")

    def test_cluster_counts_as_text(self):
        traces = self.trace_creator.create_traces(self.materialized)
        self.assertEqual(list(traces[1].text), ["2"])
        self.assertEqual(traces[1].mode, "markers+text")

        no_counts = TraceCreator(show_cluster_counts=False).create_traces(self.materialized)
        self.assertEqual(no_counts[1].mode, "markers")

    def test_hover_text(self):
        traces = self.trace_creator.create_traces(self.materialized)
        self.assertIn("Marker 2", traces[0].hovertext[0])
        self.assertIn("2 markers", traces[1].hovertext[0])

    def test_highlight(self):
        point_index = int(np.flatnonzero(self.materialized.marker_counts == 1)[0])
        traces = self.trace_creator.create_traces(self.materialized, highlight_indices=[point_index])
        self.assertEqual(traces[0].customdata[0], point_index)
        self.assertEqual(traces[0].marker.line.width[0], 3)
        self.assertEqual(traces[1].marker.line.width[0], 1)

    def test_empty_materialization(self):
        traces = self.trace_creator.create_traces(MarkerClusterEngine().materialize(0))
        self.assertEqual(len(traces), 2)
        self.assertEqual(len(traces[0].x), 0)
        self.assertEqual(len(traces[1].x), 0)


class TestCellsFromSelection(unittest.TestCase):
    """Test cases for TraceCreator.cells_from_selection"""

    def test_empty_selection(self):
        self.assertEqual(TraceCreator.cells_from_selection(None), ([], {}))
        self.assertEqual(TraceCreator.cells_from_selection({"points": []}), ([], {}))

    def test_points_become_cells(self):
        selection = {
            "points": [
                {"curveNumber": 0, "pointNumber": 0, "customdata": 4},
                {"curveNumber": 1, "pointIndex": 2, "customdata": [7]},
                {"curveNumber": 1, "pointNumber": 3},  # no customdata
            ]
        }
        cell_ids, cell_to_point = TraceCreator.cells_from_selection(selection)
        self.assertEqual(cell_ids, [(0, 0), (1, 2)])
        self.assertEqual(cell_to_point, {(0, 0): 4, (1, 2): 7})

    def test_round_trip_through_engine(self):
        """Test selecting every drawn point resolves to all markers and clusters"""
        engine = MarkerClusterEngine()
        engine.add_markers([0.0, 0.0001, 45.0], [0.0, 0.0001, -122.0])
        traces = TraceCreator().create_traces(engine.materialize(0))

        points = []
        for curve_number, trace in enumerate(traces):
            for point_number, index in enumerate(trace.customdata):
                points.append(
                    {"curveNumber": curve_number, "pointNumber": point_number, "customdata": index}
                )
        result = engine.resolve_pick(*TraceCreator.cells_from_selection({"points": points}))

        self.assertEqual(result.marker_ids, [2])
        self.assertEqual(len(result.cluster_ids), 1)
        self.assertEqual(sorted(engine.cluster_marker_ids(result.cluster_ids[0])), [0, 1])


if __name__ == "__main__":
    unittest.main()
