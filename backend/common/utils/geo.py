"""
Geographic utility functions.

This module provides the proximity math used by post feeds, user discovery
and the notification poll: great-circle distance, a rectangular pre-filter
box and the exact radius post-filter.
"""

from math import radians, cos, sin, atan2, sqrt, pi
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

EARTH_RADIUS_KM = 6371.0

# Length of one degree of latitude on the same sphere haversine_km uses
KM_PER_DEGREE = EARTH_RADIUS_KM * pi / 180

T = TypeVar("T")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate distance between two points in kilometres using Haversine formula.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometres
    """
    lat1, lon1, lat2, lon2 = map(radians, [float(lat1), float(lon1), float(lat2), float(lon2)])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lon: float, radius_km: float) -> Tuple[float, float, float, float]:
    """
    Get the lat/lon rectangle that contains the circle around a point.

    Returns:
        (min_lat, max_lat, min_lon, max_lon)
    """
    lat = float(lat)
    lon = float(lon)
    lat_offset = radius_km / KM_PER_DEGREE

    cos_lat = abs(cos(radians(lat)))
    if cos_lat < 1e-6:
        # At the poles every longitude is within reach
        lon_offset = 180.0
    else:
        lon_offset = min(radius_km / (KM_PER_DEGREE * cos_lat), 180.0)

    return (
        max(lat - lat_offset, -90.0),
        min(lat + lat_offset, 90.0),
        lon - lon_offset,
        lon + lon_offset,
    )


def fixed_box(lat: float, lon: float, degrees: float) -> Tuple[float, float, float, float]:
    """Square box of +/- `degrees` around a point, as (min_lat, max_lat, min_lon, max_lon)."""
    lat = float(lat)
    lon = float(lon)
    return (lat - degrees, lat + degrees, lon - degrees, lon + degrees)


def within_radius(
    lat: float,
    lon: float,
    items: Iterable[T],
    cutoff_km: float,
    coords: Callable[[T], Tuple[Optional[float], Optional[float]]],
) -> List[Tuple[T, float]]:
    """
    Keep the items whose great-circle distance from (lat, lon) is <= cutoff_km.

    Items without coordinates are dropped before any distance is computed.
    Input order is preserved; each kept item is paired with its distance in km.
    """
    kept = []
    for item in items:
        item_lat, item_lon = coords(item)
        if item_lat is None or item_lon is None:
            continue
        distance = haversine_km(lat, lon, item_lat, item_lon)
        if distance <= cutoff_km:
            kept.append((item, distance))
    return kept
