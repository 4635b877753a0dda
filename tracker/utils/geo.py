# tracker/utils/geo.py

"""
Geospatial utility functions.
"""

import math
from typing import Tuple

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """
    Compute the great-circle distance between two points on the Earth.

    Parameters
    ----------
    a
        (latitude, longitude) of point A, in decimal degrees.
    b
        (latitude, longitude) of point B, in decimal degrees.

    Returns
    -------
    float
        Distance between A and B in kilometres.
    """
    lat1, lon1 = a
    lat2, lon2 = b
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lam = math.radians(lon2 - lon1)
    h = math.sin(d_phi/2)**2 + math.cos(phi1)*math.cos(phi2)*math.sin(d_lam/2)**2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def haversine(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """
    Same as `haversine_km`, in metres.
    """
    return haversine_km(a, b) * 1000.0


def initial_bearing(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """
    Initial great-circle bearing from A towards B.

    Returns
    -------
    float
        Bearing in degrees, normalized to [0, 360).
    """
    lat1, lon1 = a
    lat2, lon2 = b
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_lam = math.radians(lon2 - lon1)
    y = math.sin(d_lam) * math.cos(phi2)
    x = math.cos(phi1)*math.sin(phi2) - math.sin(phi1)*math.cos(phi2)*math.cos(d_lam)
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def is_within(a: Tuple[float, float], b: Tuple[float, float], radius_km: float) -> bool:
    """Check whether B lies inside or on a circle of `radius_km` around A."""
    return haversine(a, b) <= radius_km * 1000.0
