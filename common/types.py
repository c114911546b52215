"""
Type Definitions for the Spatial Value Library.

This module defines the geometry variant tag shared by the value model and
every codec, along with the aliases used for nested coordinate arrays.

Design Rationale
----------------
The set of geometry variants is closed. Codecs dispatch on the
``GeometryType`` tag carried by each value instead of probing classes, so
each codec handles every variant explicitly and a substituted subclass is
still encoded by the rules of the variant it registers for.
"""

from enum import Enum
from typing import Any, Dict, List, Union


class GeometryType(str, Enum):
    """Tag naming each geometry variant.

    The value is the structured-form ``type`` name; ``wkt_keyword`` and
    ``wkb_code`` give the names used by the text and binary encodings.
    """

    POINT = "Point"
    LINE_STRING = "LineString"
    POLYGON = "Polygon"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    MULTI_POLYGON = "MultiPolygon"
    GEOMETRY_COLLECTION = "GeometryCollection"

    @property
    def wkt_keyword(self) -> str:
        """Upper-case WKT keyword, e.g. ``MULTIPOLYGON``."""
        return self.value.upper()

    @property
    def wkb_code(self) -> int:
        """OGC WKB geometry type code (1-7)."""
        return _WKB_CODES[self]

    @classmethod
    def from_wkt_keyword(cls, keyword: str) -> 'GeometryType':
        """Look up a tag by its (case-insensitive) WKT keyword.

        Raises
        ------
        KeyError
            If the keyword names no known variant.
        """
        return _BY_WKT_KEYWORD[keyword.upper()]

    @classmethod
    def from_wkb_code(cls, code: int) -> 'GeometryType':
        """Look up a tag by its WKB type code.

        Raises
        ------
        KeyError
            If the code names no known variant.
        """
        return _BY_WKB_CODE[code]

    @classmethod
    def from_name(cls, name: str) -> 'GeometryType':
        """Look up a tag by its structured-form ``type`` name.

        Raises
        ------
        ValueError
            If the name is not a known variant.
        """
        return cls(name)


_WKB_CODES: Dict[GeometryType, int] = {
    GeometryType.POINT: 1,
    GeometryType.LINE_STRING: 2,
    GeometryType.POLYGON: 3,
    GeometryType.MULTI_POINT: 4,
    GeometryType.MULTI_LINE_STRING: 5,
    GeometryType.MULTI_POLYGON: 6,
    GeometryType.GEOMETRY_COLLECTION: 7,
}

_BY_WKB_CODE: Dict[int, GeometryType] = {code: tag for tag, code in _WKB_CODES.items()}

_BY_WKT_KEYWORD: Dict[str, GeometryType] = {tag.wkt_keyword: tag for tag in GeometryType}


# Nested coordinate shapes, one level per variant depth:
#   Point -> Position, LineString/MultiPoint -> List[Position], ...
Position = List[float]
Coordinates = Union[Position, List[Any]]

# Structured (GeoJSON-like) mapping form
StructuredGeometry = Dict[str, Any]
