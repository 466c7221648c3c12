"""
Marker management callbacks for the marker map.

Handles adding single markers, loading marker files, resetting the engine
and applying clustering settings. Every change bumps the markers-version
store so the map re-renders.
"""

from typing import List, Tuple

import dash_bootstrap_components as dbc  # type: ignore[import]
import numpy as np
from dash import Input, Output, State, callback_context, no_update


class MarkerCallbacks:
    """Handles marker input and clustering settings callbacks"""

    def __init__(self, app, engine, marker_loader, config=None):
        """
        Initialize marker callbacks.

        Args:
            app: Dash application instance
            engine: MarkerClusterEngine receiving the markers
            marker_loader: MarkerLoader instance for CSV loading
            config: Configuration object (optional)
        """
        self.app = app
        self.engine = engine
        self.marker_loader = marker_loader
        self.config = config

        # Coordinates in insertion order, replayed when the engine is rebuilt
        self.marker_coordinates: List[Tuple[float, float]] = []

        self.setup_callbacks()

    def setup_callbacks(self):
        """Setup all marker callbacks"""
        self._setup_marker_action_callback()

    def _setup_marker_action_callback(self):
        @self.app.callback(
            [Output("markers-version", "data"), Output("marker-status", "children")],
            [
                Input("add-marker-button", "n_clicks"),
                Input("load-csv-button", "n_clicks"),
                Input("reset-button", "n_clicks"),
                Input("apply-settings-button", "n_clicks"),
            ],
            [
                State("lat-input", "value"),
                State("lon-input", "value"),
                State("csv-path-input", "value"),
                State("clustering-switch", "value"),
                State("distance-input", "value"),
                State("scale-slider", "value"),
                State("markers-version", "data"),
            ],
            prevent_initial_call=True,
        )
        def handle_marker_action(add_clicks, load_clicks, reset_clicks, apply_clicks,
                                 latitude, longitude, csv_path, clustering, distance, scale,
                                 version):
            ctx = callback_context
            if not ctx.triggered:
                return no_update, no_update
            button_id = ctx.triggered[0]["prop_id"].split(".")[0]

            try:
                if button_id == "add-marker-button":
                    message, color = self.add_marker(latitude, longitude)
                elif button_id == "load-csv-button":
                    message, color = self.load_csv(csv_path)
                elif button_id == "reset-button":
                    message, color = self.reset_markers()
                elif button_id == "apply-settings-button":
                    message, color = self.apply_settings(clustering, distance, scale)
                else:
                    return no_update, no_update
            except (ValueError, KeyError, FileNotFoundError) as e:
                print(f"⚠️  Warning: {button_id} failed: {e}")
                return no_update, dbc.Alert(str(e), color="danger", className="small py-2")

            return (version or 0) + 1, dbc.Alert(message, color=color, className="small py-2")

    def add_marker(self, latitude, longitude):
        """Add one marker from the sidebar inputs."""
        if latitude is None or longitude is None:
            return "Enter both a latitude and a longitude.", "warning"
        latitude = float(latitude)
        longitude = float(longitude)
        if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
            raise ValueError(f"Coordinates out of range: ({latitude}, {longitude})")

        marker_id = self.engine.add_marker(latitude, longitude)
        self.marker_coordinates.append((latitude, longitude))
        return f"Added marker {marker_id} at ({latitude:.4f}, {longitude:.4f})", "success"

    def load_csv(self, path):
        """Load a marker CSV and add every row to the engine."""
        frame = self.marker_loader.load_markers(path or None)
        marker_ids = self.marker_loader.populate(self.engine, frame)
        self.marker_coordinates.extend(
            zip(frame["latitude"].astype(float), frame["longitude"].astype(float))
        )
        return f"Loaded {len(marker_ids)} markers ({self.engine.number_of_markers} total)", "success"

    def reset_markers(self):
        """Remove every marker from the engine."""
        n_removed = self.engine.number_of_markers
        self.engine.reset()
        self.marker_coordinates.clear()
        return f"Removed {n_removed} markers", "info"

    def apply_settings(self, clustering, distance, scale):
        """
        Apply clustering settings from the sidebar.

        Switching clustering or changing the distance rebuilds the engine from
        the recorded coordinates; marker ids are preserved because markers are
        replayed in their original order.
        """
        clustering = bool(clustering)
        distance = float(distance) if distance is not None else self.engine.distance_threshold
        scale = float(scale) if scale is not None else self.engine.max_cluster_scale_factor
        if not distance > 0.0:
            raise ValueError(f"Cluster distance must be positive, got {distance}")

        self.engine.max_cluster_scale_factor = scale
        rebuild = (
            clustering != self.engine.clustering
            or distance != self.engine.distance_threshold
        )
        if not rebuild:
            return f"Max cluster scale set to {scale:g}", "info"

        self.engine.reset()
        self.engine.clustering = clustering
        self.engine.distance_threshold = distance
        if self.marker_coordinates:
            latitudes, longitudes = np.array(self.marker_coordinates, dtype=float).T
            self.engine.add_markers(latitudes, longitudes)
        return (
            f"Re-clustered {self.engine.number_of_markers} markers "
            f"(clustering {'on' if clustering else 'off'}, distance {distance:g}px)",
            "success",
        )
