"""Point and rectangle containment against a roof polygon.

Boundary points count as inside. A rectangle is inside only when all four of its
rotated corners are; partially covered panels are rejected, never clipped.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon
from shapely.prepared import PreparedGeometry, prep

from .polygon import distinct_vertex_count, to_shapely
from .projection import rotate_point

Point = Tuple[float, float]
PolygonLike = Union[Sequence[Point], Polygon, PreparedGeometry]


def prepare_polygon(polygon: PolygonLike) -> PreparedGeometry:
    """Return a prepared geometry for repeated point tests."""

    if isinstance(polygon, PreparedGeometry):
        return polygon
    if isinstance(polygon, Polygon):
        return prep(polygon)
    return prep(to_shapely(polygon))


def _is_degenerate(polygon: PolygonLike) -> bool:
    if isinstance(polygon, (Polygon, PreparedGeometry)):
        return False
    return distinct_vertex_count(polygon) < 3


def point_in_polygon(point: Point, polygon: PolygonLike) -> bool:
    """True if ``point`` lies inside or on the boundary of ``polygon``."""

    if _is_degenerate(polygon):
        return False
    prepared = prepare_polygon(polygon)
    return bool(prepared.covers(ShapelyPoint(point[0], point[1])))


def rectangle_corners(
    center: Point,
    half_width_deg: float,
    half_height_deg: float,
    rotation_deg: float,
) -> List[Point]:
    """Corners of an axis-aligned rectangle rotated about its own center.

    Order: south-west, south-east, north-east, north-west (before rotation).
    """

    cx, cy = center
    corners = [
        (cx - half_width_deg, cy - half_height_deg),
        (cx + half_width_deg, cy - half_height_deg),
        (cx + half_width_deg, cy + half_height_deg),
        (cx - half_width_deg, cy + half_height_deg),
    ]
    return [rotate_point(c, rotation_deg, center) for c in corners]


def rectangle_fully_inside(
    center: Point,
    half_width_deg: float,
    half_height_deg: float,
    rotation_deg: float,
    polygon: PolygonLike,
) -> bool:
    if _is_degenerate(polygon):
        return False
    corners = rectangle_corners(center, half_width_deg, half_height_deg, rotation_deg)
    prepared = prepare_polygon(polygon)
    return all(point_in_polygon(c, prepared) for c in corners)
