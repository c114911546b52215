"""
Geospatial Module for the spatial value library.

This module provides:
- The immutable geometry value model (OGC Simple Features variants)
- The antimeridian-aware bounding box engine
"""

from geospatial.geometries import (
    Geometry,
    GeometryComposite,
    Point,
    LineString,
    Polygon,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    GeometryCollection,
    iter_points,
)

from geospatial.bounding_box import (
    BoundingBox,
    find_shortest_longitude_arc,
    normalize_longitude,
)

__all__ = [
    # Geometry model
    "Geometry",
    "GeometryComposite",
    "Point",
    "LineString",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "GeometryCollection",
    "iter_points",
    # Bounding box
    "BoundingBox",
    "find_shortest_longitude_arc",
    "normalize_longitude",
]
