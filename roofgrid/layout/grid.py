"""Panel grid generation for one roof polygon at one rotation.

The algorithm is deliberately simple and deterministic:

1. Axis-aligned bounding box of the polygon; one latitude (bbox mid-latitude)
   is used for the whole region.
2. Grid step = panel size + spacing, inflated by the spacing factor and
   converted to degrees at that latitude.
3. ``ceil(bbox / step)`` rows and columns of candidate centers anchored at the
   bbox minimum corner, row-major.
4. The whole grid is rotated about the polygon's vertex centroid.
5. A candidate survives only if its center and all four corners of its own
   rotated footprint (rotated about the panel center) are inside the polygon.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np
from shapely.errors import GEOSException
from shapely.prepared import prep

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..geo.containment import point_in_polygon, rectangle_corners
from ..geo.polygon import Point, bounding_box, distinct_vertex_count, normalize_ring, to_shapely, vertex_centroid
from ..geo.projection import meters_to_degrees, rotate_points
from .types import Panel

logger = logging.getLogger(__name__)

# Steps below this (in degrees, roughly 0.1 mm) are treated as degenerate.
MIN_STEP_DEGREES = 1e-9


def panel_id(index: int, row: int, col: int, region_id: int, generation: int, stable: bool) -> str:
    if stable:
        return f"region-{region_id}-r{row}-c{col}"
    return f"panel-{generation}-{index}"


def grid_shape(bbox_width: float, bbox_height: float, step_x: float, step_y: float) -> Tuple[int, int]:
    """Number of (rows, cols) for a bbox; (0, 0) when the grid is degenerate."""

    if not all(math.isfinite(v) for v in (bbox_width, bbox_height, step_x, step_y)):
        return 0, 0
    if bbox_width <= 0 or bbox_height <= 0:
        return 0, 0
    if step_x < MIN_STEP_DEGREES or step_y < MIN_STEP_DEGREES:
        return 0, 0
    return int(math.ceil(bbox_height / step_y)), int(math.ceil(bbox_width / step_x))


def candidate_centers(
    bbox: Tuple[float, float, float, float],
    step_x: float,
    step_y: float,
    num_rows: int,
    num_cols: int,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Unrotated grid centers, row outer / column inner.

    Returns:
        (xs, ys, rows, cols) flat arrays of equal length
    """

    rows, cols = np.meshgrid(np.arange(num_rows), np.arange(num_cols), indexing="ij")
    rows = rows.ravel()
    cols = cols.ravel()
    xs = bbox[0] + step_x * cols.astype(np.float64)
    ys = bbox[1] + step_y * rows.astype(np.float64)
    return xs, ys, rows, cols


def generate_panels(
    polygon: Sequence[Sequence[float]],
    rotation: float,
    config: LayoutConfig = DEFAULT_CONFIG,
    *,
    region_id: int = 0,
    generation: int = 0,
) -> Tuple[Panel, ...]:
    """Tile ``polygon`` with whole panels at ``rotation`` degrees (clockwise).

    Never raises for bad geometry: degenerate polygons, non-finite rotations,
    zero steps and oversize grids all produce an empty tuple.

    Args:
        polygon: closed or open ring of (lng, lat) pairs
        rotation: degrees, map bearing convention
        config: panel dimensions, spacing and grid cap
        region_id: owner region, used by stable panel ids
        generation: store generation counter, used by per-generation ids

    Returns:
        Panels in generation order.
    """

    try:
        ring = normalize_ring(polygon)
        rotation = float(rotation)
    except (TypeError, ValueError) as exc:
        logger.warning("Region %s: cannot generate panels: %s", region_id, exc)
        return ()

    if not math.isfinite(rotation):
        logger.warning("Region %s: non-finite rotation %r", region_id, rotation)
        return ()
    if distinct_vertex_count(ring) < 3:
        logger.debug("Region %s: fewer than 3 distinct vertices", region_id)
        return ()

    bbox = bounding_box(ring)
    bbox_w = bbox[2] - bbox[0]
    bbox_h = bbox[3] - bbox[1]
    if bbox_w <= 0 or bbox_h <= 0:
        logger.debug("Region %s: degenerate bounding box", region_id)
        return ()

    shape = to_shapely(ring)
    if shape.area <= 0:
        logger.debug("Region %s: zero-area polygon", region_id)
        return ()

    if bbox[1] < -90.0 or bbox[3] > 90.0:
        logger.warning("Region %s: latitude outside [-90, 90]", region_id)
        return ()

    latitude = (bbox[1] + bbox[3]) / 2.0
    step_x, step_y = meters_to_degrees(
        config.panel_width_m + config.spacing_m,
        config.panel_height_m + config.spacing_m,
        latitude,
        spacing_factor=config.spacing_factor,
        earth_radius_m=config.earth_radius_m,
    )

    num_rows, num_cols = grid_shape(bbox_w, bbox_h, step_x, step_y)
    if num_rows == 0 or num_cols == 0:
        logger.warning("Region %s: degenerate grid step (%r, %r)", region_id, step_x, step_y)
        return ()
    if num_rows * num_cols > config.max_grid_cells:
        logger.warning(
            "Region %s: %d x %d grid exceeds max_grid_cells=%d; no panels generated",
            region_id, num_rows, num_cols, config.max_grid_cells,
        )
        return ()

    half_w, half_h = meters_to_degrees(
        config.panel_width_m / 2.0,
        config.panel_height_m / 2.0,
        latitude,
        spacing_factor=config.spacing_factor,
        earth_radius_m=config.earth_radius_m,
    )

    xs, ys, rows, cols = candidate_centers(bbox, step_x, step_y, num_rows, num_cols)
    pivot = vertex_centroid(ring)
    rxs, rys = rotate_points(xs, ys, rotation, pivot)

    prepared = prep(shape)
    panels: List[Panel] = []
    try:
        for i in range(len(rxs)):
            center: Point = (float(rxs[i]), float(rys[i]))
            if not point_in_polygon(center, prepared):
                continue
            corners = rectangle_corners(center, half_w, half_h, rotation)
            if not all(point_in_polygon(c, prepared) for c in corners):
                continue
            row, col = int(rows[i]), int(cols[i])
            panels.append(
                Panel(
                    id=panel_id(len(panels), row, col, region_id, generation, config.stable_panel_ids),
                    corners=tuple(corners),
                    row=row,
                    col=col,
                )
            )
    except GEOSException as exc:
        # invalid (e.g. self-intersecting) rings can make GEOS give up
        logger.warning("Region %s: containment test failed: %s", region_id, exc)
        return ()

    logger.debug(
        "Region %s: %d panels from %d candidates at %.2f deg",
        region_id, len(panels), num_rows * num_cols, rotation,
    )
    return tuple(panels)
