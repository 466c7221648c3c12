"""
Marker data loading and caching module.

This module handles reading marker coordinates from CSV files:
- Column selection and renaming to latitude/longitude
- Dropping rows without usable coordinates
- Per-path in-memory caching
- Feeding loaded markers into a clustering engine
"""

import os
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd


class MarkerLoader:
    """Handles loading and caching of marker coordinate tables."""

    def __init__(self, config=None):
        """
        Initialize MarkerLoader with configuration.

        Args:
            config: Configuration object providing get_markers_csv() and the
                latitude_column / longitude_column names (optional)
        """
        self.config = config
        self.data_cache: Dict[str, pd.DataFrame] = {}  # In-memory cache

        self.latitude_column = getattr(config, "latitude_column", None) or "latitude"
        self.longitude_column = getattr(config, "longitude_column", None) or "longitude"

    def load_markers(self, path: Optional[str] = None) -> pd.DataFrame:
        """
        Load marker coordinates from a CSV file.

        Args:
            path: CSV file to read; defaults to the configured marker CSV

        Returns:
            DataFrame with float 'latitude' and 'longitude' columns, plus any
            other columns from the file

        Raises:
            FileNotFoundError: If no path is configured or the file is missing
            KeyError: If the coordinate columns are not present
        """
        if path is None:
            path = self.config.get_markers_csv() if self.config else None
        if not path:
            raise FileNotFoundError("No marker CSV file given or configured")

        # Check cache first
        if path in self.data_cache:
            print(f"✓ [Cache HIT] Using cached markers for {os.path.basename(path)}")
            return self.data_cache[path]

        if not os.path.exists(path):
            raise FileNotFoundError(f"Marker CSV not found: {path}")

        print(f"⏳ [Cache MISS] Loading markers from: {path}")
        frame = pd.read_csv(path)
        frame = self.prepare_markers(frame)

        self.data_cache[path] = frame
        print(f"💾 Cached {len(frame)} markers from {os.path.basename(path)}")
        return frame

    def prepare_markers(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Normalise coordinate columns and drop rows that cannot be placed."""
        missing = [
            column
            for column in (self.latitude_column, self.longitude_column)
            if column not in frame.columns
        ]
        if missing:
            raise KeyError(
                f"Marker table is missing column(s) {missing}. Available: {list(frame.columns)}"
            )

        frame = frame.rename(
            columns={self.latitude_column: "latitude", self.longitude_column: "longitude"}
        )
        frame["latitude"] = pd.to_numeric(frame["latitude"], errors="coerce")
        frame["longitude"] = pd.to_numeric(frame["longitude"], errors="coerce")

        valid = frame["latitude"].between(-90.0, 90.0) & frame["longitude"].between(-180.0, 180.0)
        n_dropped = int((~valid).sum())
        if n_dropped:
            print(f"Warning: Dropping {n_dropped} marker row(s) with missing or out-of-range coordinates")

        return frame[valid].reset_index(drop=True)

    def populate(self, engine, frame: pd.DataFrame) -> np.ndarray:
        """
        Add every marker of a loaded table to a clustering engine, in row order.

        Args:
            engine: MarkerClusterEngine receiving the markers
            frame: Table returned by load_markers / prepare_markers

        Returns:
            Array of the marker ids assigned to each row
        """
        marker_ids = engine.add_markers(frame["latitude"].to_numpy(), frame["longitude"].to_numpy())
        print(f"✓ Added {len(marker_ids)} markers ({engine.number_of_nodes} cluster nodes)")
        return marker_ids

    def get_summary(self, frame: pd.DataFrame) -> Dict[str, Any]:
        """Bounding box and count of a marker table, for status displays."""
        if frame.empty:
            return {"count": 0}
        return {
            "count": len(frame),
            "lat_min": float(frame["latitude"].min()),
            "lat_max": float(frame["latitude"].max()),
            "lon_min": float(frame["longitude"].min()),
            "lon_max": float(frame["longitude"].max()),
        }

    def clear_cache(self) -> None:
        self.data_cache.clear()
