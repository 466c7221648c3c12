"""
Tests for marker data loading.

Tests the MarkerLoader class for CSV reading, column mapping, row
filtering, caching and feeding markers into a clustering engine.
"""

import os
import tempfile
import unittest

import numpy as np
import pandas as pd

from marker_clustering.src.clustering import MarkerClusterEngine
from marker_clustering.src.data.loader import MarkerLoader
from marker_clustering.tests import create_test_config, create_test_markers


class TestMarkerLoader(unittest.TestCase):
    """Test cases for MarkerLoader class"""

    def setUp(self):
        """Set up test fixtures"""
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.csv_path = os.path.join(self.tmpdir.name, "markers.csv")
        self.frame = create_test_markers(20, seed=9)
        self.frame.to_csv(self.csv_path, index=False)

        self.config = create_test_config(markers_csv=self.csv_path)
        self.loader = MarkerLoader(self.config)

    def test_loader_initialization(self):
        """Test MarkerLoader initialization"""
        self.assertEqual(self.loader.config, self.config)
        self.assertEqual(self.loader.data_cache, {})
        self.assertEqual(self.loader.latitude_column, "latitude")

    def test_load_configured_file(self):
        """Test loading the configured marker CSV"""
        loaded = self.loader.load_markers()
        self.assertEqual(len(loaded), 20)
        np.testing.assert_allclose(loaded["latitude"], self.frame["latitude"])
        self.assertIn("name", loaded.columns)

    def test_cache_hit_returns_same_frame(self):
        """Test caching functionality"""
        first = self.loader.load_markers(self.csv_path)
        second = self.loader.load_markers(self.csv_path)
        self.assertIs(first, second)
        self.assertIn(self.csv_path, self.loader.data_cache)

        self.loader.clear_cache()
        self.assertEqual(self.loader.data_cache, {})

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self.loader.load_markers(os.path.join(self.tmpdir.name, "missing.csv"))

    def test_no_path_configured(self):
        loader = MarkerLoader(create_test_config(markers_csv=None))
        with self.assertRaises(FileNotFoundError):
            loader.load_markers()
        with self.assertRaises(FileNotFoundError):
            MarkerLoader().load_markers()

    def test_custom_column_names(self):
        """Test column mapping from the configuration"""
        loader = MarkerLoader(create_test_config(latitude_column="LAT", longitude_column="LON"))
        frame = pd.DataFrame({"LAT": [1.0, 2.0], "LON": [3.0, 4.0]})
        prepared = loader.prepare_markers(frame)
        self.assertEqual(list(prepared["latitude"]), [1.0, 2.0])
        self.assertEqual(list(prepared["longitude"]), [3.0, 4.0])

    def test_missing_columns(self):
        with self.assertRaises(KeyError):
            self.loader.prepare_markers(pd.DataFrame({"lat": [0.0], "lon": [0.0]}))

    def test_invalid_rows_are_dropped(self):
        frame = pd.DataFrame(
            {
                "latitude": [10.0, "n/a", 95.0, -45.0, None],
                "longitude": [20.0, 0.0, 0.0, 200.0, 5.0],
            }
        )
        prepared = self.loader.prepare_markers(frame)
        self.assertEqual(len(prepared), 1)
        self.assertEqual(prepared.loc[0, "latitude"], 10.0)

    def test_populate(self):
        """Test adding loaded markers to an engine"""
        engine = MarkerClusterEngine()
        loaded = self.loader.load_markers()
        marker_ids = self.loader.populate(engine, loaded)

        np.testing.assert_array_equal(marker_ids, np.arange(20))
        self.assertEqual(engine.number_of_markers, 20)
        self.assertEqual(engine.check_consistency(), [])

    def test_get_summary(self):
        summary = self.loader.get_summary(self.loader.load_markers())
        self.assertEqual(summary["count"], 20)
        self.assertLessEqual(summary["lat_min"], summary["lat_max"])
        self.assertEqual(self.loader.get_summary(pd.DataFrame(columns=["latitude", "longitude"])),
                         {"count": 0})


if __name__ == "__main__":
    unittest.main()
