"""Tests for point-in-polygon and whole-rectangle containment."""

import pytest
from shapely.geometry import Polygon

from roofgrid.geo.containment import (
    point_in_polygon,
    prepare_polygon,
    rectangle_corners,
    rectangle_fully_inside,
)

UNIT_SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0), (0.0, 0.0)]
L_SHAPE = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2), (0, 0)]


class TestPointInPolygon:
    def test_inside(self):
        assert point_in_polygon((0.5, 0.5), UNIT_SQUARE) is True

    def test_outside(self):
        assert point_in_polygon((1.5, 0.5), UNIT_SQUARE) is False

    def test_boundary_counts_as_inside(self):
        assert point_in_polygon((1.0, 0.5), UNIT_SQUARE) is True
        assert point_in_polygon((0.0, 0.0), UNIT_SQUARE) is True

    def test_concave_notch(self):
        assert point_in_polygon((0.5, 1.5), L_SHAPE) is True
        assert point_in_polygon((1.5, 1.5), L_SHAPE) is False

    def test_degenerate_ring_contains_nothing(self):
        assert point_in_polygon((0.5, 0.5), [(0, 0), (1, 1), (0, 0)]) is False

    def test_accepts_shapely_and_prepared(self):
        poly = Polygon(UNIT_SQUARE)
        assert point_in_polygon((0.5, 0.5), poly)
        assert point_in_polygon((0.5, 0.5), prepare_polygon(poly))


class TestRectangleCorners:
    def test_unrotated_order(self):
        corners = rectangle_corners((0.5, 0.5), 0.1, 0.2, 0.0)
        assert corners == [
            pytest.approx((0.4, 0.3)),
            pytest.approx((0.6, 0.3)),
            pytest.approx((0.6, 0.7)),
            pytest.approx((0.4, 0.7)),
        ]

    def test_rotation_is_about_center(self):
        center = (10.0, 0.0)
        corners = rectangle_corners(center, 0.001, 0.002, 70.0)
        cx = sum(c[0] for c in corners) / 4.0
        cy = sum(c[1] for c in corners) / 4.0
        assert (cx, cy) == pytest.approx(center, abs=1e-12)


class TestRectangleFullyInside:
    def test_small_rectangle_inside(self):
        assert rectangle_fully_inside((0.5, 0.5), 0.1, 0.1, 0.0, UNIT_SQUARE)

    def test_oversized_rectangle_rejected(self):
        assert not rectangle_fully_inside((0.5, 0.5), 0.6, 0.1, 0.0, UNIT_SQUARE)

    def test_partially_outside_rejected(self):
        assert not rectangle_fully_inside((0.95, 0.5), 0.1, 0.1, 0.0, UNIT_SQUARE)

    def test_rotation_pushes_corners_out(self):
        assert rectangle_fully_inside((0.5, 0.5), 0.49, 0.49, 0.0, UNIT_SQUARE)
        assert not rectangle_fully_inside((0.5, 0.5), 0.49, 0.49, 45.0, UNIT_SQUARE)

    def test_rectangle_over_concave_notch_rejected(self):
        # center inside, but the rectangle spans the missing quadrant
        assert point_in_polygon((0.9, 0.9), L_SHAPE)
        assert not rectangle_fully_inside((0.9, 0.9), 0.3, 0.3, 0.0, L_SHAPE)

    def test_degenerate_polygon(self):
        assert not rectangle_fully_inside((0.5, 0.5), 0.1, 0.1, 0.0, [(0, 0), (1, 0)])
