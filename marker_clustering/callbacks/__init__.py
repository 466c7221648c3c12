"""
Callbacks package for the marker map app.

This package contains all Dash callback implementations organized by functionality.
"""

from .main_plot import MainPlotCallbacks
from .marker_callbacks import MarkerCallbacks
from .pick_callbacks import PickCallbacks
from .ui_callbacks import UICallbacks

__all__ = [
    "MainPlotCallbacks",
    "MarkerCallbacks",
    "PickCallbacks",
    "UICallbacks",
]
