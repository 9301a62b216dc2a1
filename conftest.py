import math

import pytest

from roofgrid.geo.projection import EARTH_RADIUS_M

LAT0 = 40.0
LNG0 = -105.0


def _meters_to_lnglat(points_m, lat0=LAT0, lng0=LNG0):
    deg_per_m_lat = 180.0 / (math.pi * EARTH_RADIUS_M)
    deg_per_m_lng = deg_per_m_lat / math.cos(math.radians(lat0))
    ring = [(lng0 + x * deg_per_m_lng, lat0 + y * deg_per_m_lat) for x, y in points_m]
    ring.append(ring[0])
    return ring


@pytest.fixture
def ring_from_meters():
    """Factory: local (east, north) meter offsets -> closed lng/lat ring."""
    return _meters_to_lnglat


@pytest.fixture
def square_10m():
    return _meters_to_lnglat([(0, 0), (10, 0), (10, 10), (0, 10)])


@pytest.fixture
def l_shape():
    return _meters_to_lnglat([(0, 0), (12, 0), (12, 5), (5, 5), (5, 12), (0, 12)])


@pytest.fixture
def triangle():
    return _meters_to_lnglat([(0, 0), (14, 0), (7, 11)])
