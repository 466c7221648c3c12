"""
Core package for the marker map app.

This package contains server startup and browser handling.
"""

from .app import MarkerMapCore

__all__ = ["MarkerMapCore"]
