"""
Marker Clustering Package

Incremental multi-resolution clustering of geographic map markers, with an
interactive Dash map that switches clustering level as the view zooms.
"""

__version__ = "1.0.0"
