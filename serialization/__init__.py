"""
Serialization Module for the spatial value library.

This module provides the codecs that move geometry values across the
system boundary:
- Well-Known Text (WKT)
- Well-Known Binary (WKB / EWKB)
- Structured GeoJSON-like mappings, including FeatureCollection unwrapping
- Storage format adapters for persistence collaborators
"""

from serialization.base import GeometryCodec
from serialization.wkt import WktCodec
from serialization.wkb import WkbCodec, ByteOrder
from serialization.geojson import GeoJsonCodec
from serialization.storage import (
    StorageFormat,
    GeometrySerializer,
    BoundingBoxSerializer,
)

__all__ = [
    "GeometryCodec",
    "WktCodec",
    "WkbCodec",
    "ByteOrder",
    "GeoJsonCodec",
    "StorageFormat",
    "GeometrySerializer",
    "BoundingBoxSerializer",
]
