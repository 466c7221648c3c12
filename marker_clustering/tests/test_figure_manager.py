"""
Tests for figure management functionality.

Tests the FigureManager class for figure creation, latitude axis labelling,
zoom level derivation and zoom state preservation.
"""

import unittest

import plotly.graph_objs as go

from marker_clustering.src.visualization.figures import (
    FigureManager,
    x_span_for_zoom,
    zoom_level_from_span,
)
from marker_clustering.utils.mercator import lat2y


class TestZoomLevelFromSpan(unittest.TestCase):
    """Test cases for span to zoom conversion"""

    def test_whole_world(self):
        # 1200 px for 360 degrees is 4.7 tiles: level 2
        self.assertEqual(zoom_level_from_span(360.0, 1200), 2)
        self.assertEqual(zoom_level_from_span(360.0, 256), 0)

    def test_halving_span_adds_a_level(self):
        for zoom in range(0, 15):
            span = x_span_for_zoom(zoom, 1200)
            self.assertEqual(zoom_level_from_span(span, 1200), zoom)
            self.assertEqual(zoom_level_from_span(span / 2.0, 1200), zoom + 1)

    def test_clamped(self):
        self.assertEqual(zoom_level_from_span(1e-9, 1200), 19)
        self.assertEqual(zoom_level_from_span(10000.0, 256), 0)
        self.assertEqual(zoom_level_from_span(0.0, 1200), 0)


class TestFigureManager(unittest.TestCase):
    """Test cases for FigureManager class"""

    def setUp(self):
        """Set up test fixtures"""
        self.figure_manager = FigureManager(plot_width_px=1200)

    def test_create_figure_basic(self):
        """Test basic figure creation"""
        traces = [go.Scattergl(x=[1.0, 2.0], y=[0.0, 1.0], mode="markers", name="Test Data")]

        fig = self.figure_manager.create_figure(traces, zoom_level=5)

        self.assertIsInstance(fig, go.Figure)
        self.assertEqual(len(fig.data), 1)
        self.assertIn("zoom level 5", fig.layout.title.text)
        self.assertEqual(fig.layout.xaxis.scaleanchor, "y")
        self.assertEqual(fig.layout.dragmode, "pan")

    def test_latitude_tick_labels(self):
        tickvals, ticktext = FigureManager.latitude_ticks([0, 45])
        self.assertEqual(ticktext, ["0°", "45°"])
        self.assertAlmostEqual(tickvals[1], lat2y(45))

    def test_create_empty_figure(self):
        fig = self.figure_manager.create_empty_figure()
        self.assertEqual(len(fig.data), 0)
        self.assertEqual(len(fig.layout.annotations), 1)

        fig = self.figure_manager.create_empty_figure(show_initial_message=False)
        self.assertEqual(len(fig.layout.annotations), 0)

    def test_zoom_level_from_relayout(self):
        """Test zoom level derivation from relayout events"""
        span = x_span_for_zoom(6, 1200)
        relayout_data = {"xaxis.range[0]": 10.0, "xaxis.range[1]": 10.0 + span}
        self.assertEqual(self.figure_manager.zoom_level_from_relayout(relayout_data), 6)

        relayout_data = {"xaxis.range": [0.0, span]}
        self.assertEqual(self.figure_manager.zoom_level_from_relayout(relayout_data), 6)

    def test_zoom_level_from_relayout_without_range(self):
        self.assertEqual(self.figure_manager.zoom_level_from_relayout(None, default=4), 4)
        self.assertEqual(self.figure_manager.zoom_level_from_relayout({"autosize": True}, default=3), 3)

    def test_zoom_state_preservation(self):
        """Test zoom state preservation"""
        fig = go.Figure()
        relayout_data = {
            "xaxis.range[0]": 12.0,
            "xaxis.range[1]": 13.0,
            "yaxis.range[0]": -1.0,
            "yaxis.range[1]": 1.0,
        }

        self.figure_manager.preserve_zoom_state(fig, relayout_data)

        self.assertEqual(list(fig.layout.xaxis.range), [12.0, 13.0])
        self.assertEqual(list(fig.layout.yaxis.range), [-1.0, 1.0])

    def test_zoom_state_from_current_figure(self):
        fig = go.Figure()
        current_figure = {"layout": {"xaxis": {"range": [1, 2]}, "yaxis": {"range": [3, 4]}}}

        self.figure_manager.preserve_zoom_state(fig, None, current_figure)

        self.assertEqual(list(fig.layout.xaxis.range), [1, 2])
        self.assertEqual(list(fig.layout.yaxis.range), [3, 4])

    def test_center_on(self):
        fig = go.Figure()
        self.figure_manager.center_on(fig, 0.0, 10.0, 6)
        x_range = fig.layout.xaxis.range
        self.assertAlmostEqual(x_range[1] - x_range[0], x_span_for_zoom(6, 1200))
        self.assertAlmostEqual((x_range[0] + x_range[1]) / 2.0, 10.0)


if __name__ == "__main__":
    unittest.main()
