"""
Spherical Mercator projection helpers.

Markers are clustered in a plane whose x axis is longitude (degrees) and
whose y axis is the Mercator-projected latitude, also expressed in degrees
so both axes share units:

    y = degrees(ln(tan(pi/4 + radians(lat)/2)))

Latitudes are clamped to the Web Mercator limit before projecting so the
poles map to finite coordinates.
"""

import math

import numpy as np

# Latitude at which the projected square world ends (y == 180)
MAX_LATITUDE = 85.0511287798066


def clamp_latitude(latitude: float) -> float:
    """Clamp latitude to the range representable in Web Mercator."""
    return max(-MAX_LATITUDE, min(MAX_LATITUDE, float(latitude)))


def lat2y(latitude: float) -> float:
    """Project latitude (degrees) onto the Mercator y axis (degrees)."""
    lat_rad = math.radians(clamp_latitude(latitude))
    return math.degrees(math.log(math.tan(math.pi / 4.0 + lat_rad / 2.0)))


def y2lat(y: float) -> float:
    """Inverse of :func:`lat2y`."""
    return math.degrees(2.0 * math.atan(math.exp(math.radians(y))) - math.pi / 2.0)


def lat2y_array(latitudes) -> np.ndarray:
    """Vectorised :func:`lat2y` for numpy arrays."""
    lat = np.clip(np.asarray(latitudes, dtype=np.float64), -MAX_LATITUDE, MAX_LATITUDE)
    return np.degrees(np.log(np.tan(np.pi / 4.0 + np.radians(lat) / 2.0)))


def y2lat_array(ys) -> np.ndarray:
    """Vectorised :func:`y2lat` for numpy arrays."""
    y = np.asarray(ys, dtype=np.float64)
    return np.degrees(2.0 * np.arctan(np.exp(np.radians(y))) - np.pi / 2.0)
