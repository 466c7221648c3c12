"""
Test package for marker clustering modules.

Contains tests for the clustering engine and its building blocks as well as
data loading, configuration, visualization, callbacks and UI components.
"""

import os


# Test utilities
def create_test_markers(n=50, seed=0, lat_range=(-60.0, 60.0), lon_range=(-170.0, 170.0)):
    """Create a reproducible marker table for testing purposes"""
    import numpy as np
    import pandas as pd

    rng = np.random.default_rng(seed)
    return pd.DataFrame(
        {
            "latitude": rng.uniform(lat_range[0], lat_range[1], n),
            "longitude": rng.uniform(lon_range[0], lon_range[1], n),
            "name": [f"marker-{i}" for i in range(n)],
        }
    )


def create_test_config(**overrides):
    """Create mock configuration for testing"""

    class MockConfig:
        def __init__(self):
            self.clustering_enabled = True
            self.distance_threshold = 80.0
            self.max_cluster_scale_factor = 2.0
            self.debug = False
            self.marker_size = 14.0
            self.initial_zoom = 2
            self.plot_width_px = 1200
            self.data_dir = "/tmp/test_marker_data"
            self.latitude_column = "latitude"
            self.longitude_column = "longitude"
            self.markers_csv = None

        def get_markers_csv(self):
            return self.markers_csv

        def has_markers_csv(self):
            return self.markers_csv is not None and os.path.exists(self.markers_csv)

    config = MockConfig()
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


def write_test_config(directory, sections=None):
    """
    Write an INI configuration file into ``directory``.

    Args:
        directory: Target directory
        sections: Mapping of section name to {option: value} written after the defaults

    Returns:
        Path of the written file
    """
    content = {
        "clustering": {"enabled": "true", "distance_threshold": "80.0"},
        "display": {"initial_zoom": "2"},
        "paths": {"data_dir": directory},
        "files": {"markers_csv": "markers.csv"},
    }
    for section, options in (sections or {}).items():
        content.setdefault(section, {}).update(options)

    path = os.path.join(directory, "config.ini")
    with open(path, "w") as f:
        for section, options in content.items():
            f.write(f"[{section}]\n")
            for option, value in options.items():
                f.write(f"{option} = {value}\n")
            f.write("\n")
    return path


__all__ = ["create_test_markers", "create_test_config", "write_test_config"]
