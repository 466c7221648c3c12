"""
Visualization modules for the marker map.

This package contains modules for creating Plotly traces from materialized
cluster state and for figure layout and zoom handling.
"""

from .figures import FigureManager, zoom_level_from_span
from .traces import TraceCreator

__all__ = ["TraceCreator", "FigureManager", "zoom_level_from_span"]
