"""Shared fixtures for the spatial value library tests."""

import pytest

from common.config import SpatialConfig, set_default_config
from geospatial import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)


@pytest.fixture(autouse=True)
def fresh_default_config():
    """Give every test a pristine process-wide configuration."""
    previous = set_default_config(SpatialConfig())
    yield
    set_default_config(previous)


def _ring():
    return LineString([
        Point(180, 0),
        Point(179, 1),
        Point(178, 2),
        Point(177, 3),
        Point(180, 0),
    ])


@pytest.fixture
def sample_geometries():
    """One geometry of every variant, keyed by structured-form type name."""
    polygon = Polygon([_ring()])
    return {
        'Point': Point(180, 0),
        'LineString': LineString([Point(180, 0), Point(179, 1)]),
        'Polygon': polygon,
        'MultiPoint': MultiPoint([Point(180, 0), Point(179, 1)]),
        'MultiLineString': MultiLineString([LineString([Point(180, 0), Point(179, 1)])]),
        'MultiPolygon': MultiPolygon([polygon]),
        'GeometryCollection': GeometryCollection([polygon, Point(0, 90)]),
    }
