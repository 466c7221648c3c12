# Utils package for marker clustering
# Contains color definitions and Mercator projection helpers

from .mercator import MAX_LATITUDE, lat2y, y2lat

__all__ = ["lat2y", "y2lat", "MAX_LATITUDE"]
