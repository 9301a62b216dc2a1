"""Polygon ring helpers.

A ring is a tuple of (lng, lat) float pairs in EPSG:4326, closed (first == last).
Simplicity (no self-intersection) is assumed and never checked.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Sequence, Tuple

from pyproj import Geod
from shapely.geometry import Polygon

Point = Tuple[float, float]
Ring = Tuple[Point, ...]
BBox = Tuple[float, float, float, float]

_WGS84 = Geod(ellps="WGS84")


def _as_point(pt: Any) -> Point:
    if isinstance(pt, (str, bytes)):
        raise TypeError(f"coordinate pair expected, got {pt!r}")
    try:
        x, y = pt[0], pt[1]
    except (TypeError, IndexError, KeyError) as exc:
        raise TypeError(f"coordinate pair expected, got {pt!r}") from exc
    lng = float(x)
    lat = float(y)
    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise ValueError(f"non-finite coordinate {pt!r}")
    return lng, lat


def normalize_ring(coords: Iterable[Sequence[float]]) -> Ring:
    """Coerce a sequence of (lng, lat) pairs into a closed ring.

    Consecutive duplicate vertices are dropped and the ring is closed if the
    caller left it open. Raises ValueError/TypeError on empty or malformed input.
    """

    if coords is None:
        raise ValueError("polygon coordinates are required")

    pts: List[Point] = []
    for raw in coords:
        pt = _as_point(raw)
        if pts and pts[-1] == pt:
            continue
        pts.append(pt)

    if not pts:
        raise ValueError("polygon has no vertices")
    if pts[0] != pts[-1]:
        pts.append(pts[0])
    return tuple(pts)


def distinct_vertices(ring: Sequence[Point]) -> List[Point]:
    """Vertices of the ring without the closing duplicate."""

    pts = list(ring)
    if len(pts) > 1 and pts[0] == pts[-1]:
        pts = pts[:-1]
    return pts


def distinct_vertex_count(ring: Sequence[Point]) -> int:
    return len(set(distinct_vertices(ring)))


def bounding_box(ring: Sequence[Point]) -> BBox:
    xs = [p[0] for p in ring]
    ys = [p[1] for p in ring]
    return min(xs), min(ys), max(xs), max(ys)


def vertex_centroid(ring: Sequence[Point]) -> Point:
    """Mean of the distinct vertices (closing vertex excluded).

    This is the pivot the whole panel grid is rotated about.
    """

    pts = distinct_vertices(ring)
    n = float(len(pts))
    return sum(p[0] for p in pts) / n, sum(p[1] for p in pts) / n


def to_shapely(ring: Sequence[Point]) -> Polygon:
    return Polygon(list(ring))


def polygon_area_m2(ring: Sequence[Point]) -> float:
    """Geodesic area of the ring on the WGS84 ellipsoid, in square meters."""

    if distinct_vertex_count(ring) < 3:
        return 0.0
    area, _perimeter = _WGS84.geometry_area_perimeter(to_shapely(ring))
    return abs(float(area))


def ring_from_geojson(obj: Any) -> Ring:
    """Extract the outer ring of a GeoJSON Polygon.

    Accepts a bare geometry, a Feature, or a FeatureCollection (first feature).
    """

    if not isinstance(obj, dict):
        raise ValueError("GeoJSON object must be a mapping")

    gtype = obj.get("type")
    if gtype == "FeatureCollection":
        features = obj.get("features") or []
        if not features:
            raise ValueError("FeatureCollection has no features")
        return ring_from_geojson(features[0])
    if gtype == "Feature":
        return ring_from_geojson(obj.get("geometry") or {})
    if gtype == "Polygon":
        rings = obj.get("coordinates") or []
        if not rings:
            raise ValueError("Polygon has no rings")
        return normalize_ring(rings[0])
    if gtype == "MultiPolygon":
        polys = obj.get("coordinates") or []
        if not polys or not polys[0]:
            raise ValueError("MultiPolygon has no polygons")
        return normalize_ring(polys[0][0])
    raise ValueError(f"unsupported GeoJSON type: {gtype!r}")
