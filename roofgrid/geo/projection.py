"""Meters to degrees conversion and map-plane rotation.

Both helpers work directly on (lng, lat) pairs. Distances are measured on a
sphere (pyproj Geod with a == b), rotations in a local frame where longitude
deltas are scaled by cos(latitude) so rotated rectangles keep their shape in
meters.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Tuple

import numpy as np
from pyproj import Geod

Point = Tuple[float, float]

EARTH_RADIUS_M = 6371008.8

# cos(lat) floor so the local frame stays invertible near the poles
_MIN_LNG_SCALE = 1e-12


@lru_cache(maxsize=8)
def _sphere(radius_m: float) -> Geod:
    return Geod(a=radius_m, b=radius_m)


def meters_to_degrees(
    width_m: float,
    height_m: float,
    latitude: float,
    spacing_factor: float = 1.0,
    earth_radius_m: float = EARTH_RADIUS_M,
) -> Tuple[float, float]:
    """Convert a (width, height) in meters to (lng, lat) degree deltas.

    The reference point sits on the prime meridian at ``latitude``; the width is
    walked due east and the height due north and the absolute coordinate change
    is returned. ``spacing_factor`` inflates both lengths before conversion.

    Returns:
        (width_degrees, height_degrees)
    """

    geod = _sphere(float(earth_radius_m))
    w = float(width_m) * float(spacing_factor)
    h = float(height_m) * float(spacing_factor)

    east_lng, _east_lat, _ = geod.fwd(0.0, float(latitude), 90.0, w)
    _north_lng, north_lat, _ = geod.fwd(0.0, float(latitude), 0.0, h)

    return abs(float(east_lng)), abs(float(north_lat) - float(latitude))


def _lng_scale(pivot_lat: float) -> float:
    return max(math.cos(math.radians(pivot_lat)), _MIN_LNG_SCALE)


def rotate_point(point: Point, angle_deg: float, pivot: Point) -> Point:
    """Rotate ``point`` clockwise (map bearing convention) about ``pivot``."""

    if float(angle_deg) % 360.0 == 0.0:
        return float(point[0]), float(point[1])

    k = _lng_scale(pivot[1])
    theta = math.radians(angle_deg)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    dx = (point[0] - pivot[0]) * k
    dy = point[1] - pivot[1]
    rx = dx * cos_t + dy * sin_t
    ry = -dx * sin_t + dy * cos_t
    return pivot[0] + rx / k, pivot[1] + ry


def rotate_points(xs: np.ndarray, ys: np.ndarray, angle_deg: float, pivot: Point) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorized rotate_point for coordinate arrays."""

    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    if float(angle_deg) % 360.0 == 0.0:
        return xs.copy(), ys.copy()

    k = _lng_scale(pivot[1])
    theta = math.radians(angle_deg)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    dx = (xs - pivot[0]) * k
    dy = ys - pivot[1]
    rx = dx * cos_t + dy * sin_t
    ry = -dx * sin_t + dy * cos_t
    return pivot[0] + rx / k, pivot[1] + ry
