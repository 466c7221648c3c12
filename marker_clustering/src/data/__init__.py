"""
Data handling modules for the marker clustering map.

This package contains modules for loading and caching marker coordinate
tables and feeding them into a clustering engine.
"""

from .loader import MarkerLoader

__all__ = ["MarkerLoader"]
