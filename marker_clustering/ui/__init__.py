"""
UI layout package for the marker map app.

This package contains the UI layout definitions for the Dash application.
"""

from .layout import COLLAPSIBLE_SECTIONS, AppLayout

__all__ = ["AppLayout", "COLLAPSIBLE_SECTIONS"]
