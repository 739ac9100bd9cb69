"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import LineString, Point

from ..models.domain import GeoPoint

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance in meters between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a slightly past 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, in meters."""

    return haversine_m(a.lat, a.lng, b.lat, b.lng)


def path_distance(path: Sequence[GeoPoint]) -> float:
    """Sum of great-circle distances along consecutive points, in meters."""

    if len(path) < 2:
        return 0.0
    return sum(distance_between(path[i], path[i + 1]) for i in range(len(path) - 1))


def path_geometry(path: Sequence[GeoPoint]) -> Point | LineString:
    """Build a shapely geometry in (lng, lat) order for a path."""

    if not path:
        raise ValueError("Cannot build a geometry for an empty path.")
    if len(path) == 1:
        return Point(path[0].lng, path[0].lat)
    return LineString([(point.lng, point.lat) for point in path])


def path_bounds(path: Sequence[GeoPoint]) -> tuple[float, float, float, float]:
    """Return ``(south, west, north, east)`` for the points of a path."""

    west, south, east, north = path_geometry(path).bounds
    return south, west, north, east
