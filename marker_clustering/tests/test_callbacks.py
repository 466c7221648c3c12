"""
Tests for callback modules.

Tests the callback classes for proper initialization, callback registration,
and interaction handling.
"""

import os
import tempfile
import unittest
from unittest.mock import MagicMock

import dash_bootstrap_components as dbc
import plotly.graph_objs as go

from marker_clustering.callbacks.main_plot import MainPlotCallbacks
from marker_clustering.callbacks.marker_callbacks import MarkerCallbacks
from marker_clustering.callbacks.pick_callbacks import PickCallbacks
from marker_clustering.callbacks.ui_callbacks import UICallbacks
from marker_clustering.src.clustering import MarkerClusterEngine
from marker_clustering.src.data.loader import MarkerLoader
from marker_clustering.src.visualization import FigureManager, TraceCreator
from marker_clustering.tests import create_test_config, create_test_markers
from marker_clustering.ui.layout import COLLAPSIBLE_SECTIONS


class TestMainPlotCallbacks(unittest.TestCase):
    """Test cases for MainPlotCallbacks class"""

    def setUp(self):
        """Set up test fixtures"""
        self.mock_app = MagicMock()
        self.engine = MarkerClusterEngine()
        self.engine.add_markers([0.0, 0.0001, 45.0], [0.0, 0.0001, -122.0])

        self.main_plot_callbacks = MainPlotCallbacks(
            self.mock_app, self.engine, TraceCreator(), FigureManager(plot_width_px=1200), initial_zoom=2
        )

    def test_main_plot_callbacks_initialization(self):
        """Test MainPlotCallbacks initialization"""
        self.assertEqual(self.main_plot_callbacks.app, self.mock_app)
        self.assertIs(self.main_plot_callbacks.engine, self.engine)
        self.assertEqual(self.main_plot_callbacks.current_zoom, 2)

    def test_callbacks_registered(self):
        """Test that callbacks are registered with the app"""
        self.assertEqual(self.mock_app.callback.call_count, 2)

    def test_render_map(self):
        """Test rendering at the initial zoom level"""
        fig, status, zoom_text = self.main_plot_callbacks.render_map()

        self.assertIsInstance(fig, go.Figure)
        self.assertEqual(len(fig.data), 2)
        self.assertIsInstance(status, dbc.Alert)
        self.assertIn("Zoom level 2", zoom_text)
        self.assertEqual(self.engine.current_markers.zoom_level, 2)

    def test_render_follows_relayout(self):
        """Test zoom level derivation from relayout events"""
        span = 1200 * 360.0 / (256 * 2 ** 12)
        relayout_data = {"xaxis.range[0]": -1.0, "xaxis.range[1]": -1.0 + span}

        self.main_plot_callbacks.render_map(relayout_data)
        self.assertEqual(self.main_plot_callbacks.current_zoom, 12)
        self.assertEqual(self.engine.current_markers.zoom_level, 12)

        # Events without ranges keep the level, autorange restores the initial one
        self.assertEqual(self.main_plot_callbacks.derive_zoom_level({"autosize": True}), 12)
        self.assertEqual(self.main_plot_callbacks.derive_zoom_level({"xaxis.autorange": True}), 2)

    def test_render_highlights_selection_for_same_level(self):
        self.main_plot_callbacks.render_map()
        point_index = int((self.engine.current_markers.marker_counts == 1).nonzero()[0][0])

        fig, _, _ = self.main_plot_callbacks.render_map(
            selection={"zoom_level": 2, "indices": [point_index]}
        )
        self.assertEqual(fig.data[0].marker.line.width[0], 3)

        fig, _, _ = self.main_plot_callbacks.render_map(
            selection={"zoom_level": 7, "indices": [point_index]}
        )
        self.assertEqual(fig.data[0].marker.line.width[0], 1)


class TestMarkerCallbacks(unittest.TestCase):
    """Test cases for MarkerCallbacks class"""

    def setUp(self):
        """Set up test fixtures"""
        self.mock_app = MagicMock()
        self.engine = MarkerClusterEngine()
        self.loader = MarkerLoader(create_test_config())
        self.marker_callbacks = MarkerCallbacks(self.mock_app, self.engine, self.loader)

    def test_callbacks_registered(self):
        self.assertEqual(self.mock_app.callback.call_count, 1)

    def test_add_marker(self):
        message, color = self.marker_callbacks.add_marker(10.0, 20.0)
        self.assertEqual(color, "success")
        self.assertIn("marker 0", message)
        self.assertEqual(self.engine.number_of_markers, 1)
        self.assertEqual(self.marker_callbacks.marker_coordinates, [(10.0, 20.0)])

    def test_add_marker_needs_both_coordinates(self):
        _, color = self.marker_callbacks.add_marker(None, 20.0)
        self.assertEqual(color, "warning")
        self.assertEqual(self.engine.number_of_markers, 0)

    def test_add_marker_out_of_range(self):
        with self.assertRaises(ValueError):
            self.marker_callbacks.add_marker(95.0, 0.0)

    def test_load_csv(self):
        """Test loading markers from a CSV file"""
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "markers.csv")
            create_test_markers(15, seed=6).to_csv(path, index=False)
            message, color = self.marker_callbacks.load_csv(path)

        self.assertEqual(color, "success")
        self.assertEqual(self.engine.number_of_markers, 15)
        self.assertEqual(len(self.marker_callbacks.marker_coordinates), 15)

    def test_reset(self):
        self.marker_callbacks.add_marker(1.0, 1.0)
        message, _ = self.marker_callbacks.reset_markers()
        self.assertIn("Removed 1", message)
        self.assertEqual(self.engine.number_of_markers, 0)
        self.assertEqual(self.marker_callbacks.marker_coordinates, [])

    def test_apply_settings_rebuilds_engine(self):
        """Test switching clustering off replays every marker"""
        for lat, lon in [(0.0, 0.0), (0.0001, 0.0001), (45.0, -122.0)]:
            self.marker_callbacks.add_marker(lat, lon)
        self.assertEqual(len(self.engine.materialize(0)), 2)

        _, color = self.marker_callbacks.apply_settings(False, 80.0, 2.0)
        self.assertEqual(color, "success")
        self.assertFalse(self.engine.clustering)
        self.assertEqual(self.engine.number_of_markers, 3)
        self.assertEqual(len(self.engine.materialize(0)), 3)
        self.assertEqual(self.engine.check_consistency(), [])

    def test_apply_scale_only(self):
        self.marker_callbacks.add_marker(0.0, 0.0)
        n_nodes = self.engine.number_of_nodes
        _, color = self.marker_callbacks.apply_settings(True, 80.0, 3.0)
        self.assertEqual(color, "info")
        self.assertEqual(self.engine.max_cluster_scale_factor, 3.0)
        self.assertEqual(self.engine.number_of_nodes, n_nodes)

    def test_apply_invalid_distance_keeps_markers(self):
        self.marker_callbacks.add_marker(0.0, 0.0)
        with self.assertRaises(ValueError):
            self.marker_callbacks.apply_settings(True, 0.0, 2.0)
        self.assertEqual(self.engine.number_of_markers, 1)


class TestPickCallbacks(unittest.TestCase):
    """Test cases for PickCallbacks class"""

    def setUp(self):
        """Set up test fixtures"""
        self.mock_app = MagicMock()
        self.engine = MarkerClusterEngine()
        self.engine.add_markers([0.0, 0.0001, 45.0], [0.0, 0.0001, -122.0])
        self.traces = TraceCreator().create_traces(self.engine.materialize(0))
        self.pick_callbacks = PickCallbacks(self.mock_app, self.engine, max_listed=1)

    def _selection(self, curve_number):
        trace = self.traces[curve_number]
        return {
            "points": [
                {"curveNumber": curve_number, "pointNumber": 0, "customdata": trace.customdata[0]}
            ]
        }

    def test_callbacks_registered(self):
        self.assertEqual(self.mock_app.callback.call_count, 1)

    def test_select_marker(self):
        details, store = self.pick_callbacks.handle_selection(self._selection(0))
        self.assertEqual(store, {"zoom_level": 0, "indices": [self.traces[0].customdata[0]]})
        self.assertIn("2", str(details))

    def test_select_cluster_lists_members(self):
        details, store = self.pick_callbacks.handle_selection(self._selection(1))
        self.assertEqual(store["indices"], [self.traces[1].customdata[0]])
        # max_listed=1 truncates the member list
        self.assertIn("+1 more", str(details))

    def test_empty_selection(self):
        _, store = self.pick_callbacks.handle_selection(None)
        self.assertIsNone(store)


class TestUICallbacks(unittest.TestCase):
    """Test cases for UICallbacks class"""

    def test_callbacks_registered(self):
        mock_app = MagicMock()
        UICallbacks(mock_app)
        self.assertEqual(mock_app.callback.call_count, len(COLLAPSIBLE_SECTIONS) + 1)

    def test_toggle_section(self):
        is_open, children = UICallbacks.toggle_section("📍 Add Markers", True)
        self.assertFalse(is_open)
        self.assertEqual(children[1], "📍 Add Markers")
        self.assertIn("chevron-right", children[0].className)


if __name__ == "__main__":
    unittest.main()
