"""
Common infrastructure for the spatial value library.

This package provides foundational components used across all modules:
- Coordinate limits, SRIDs and WKB layout constants
- The error taxonomy
- Configuration (default SRID, geometry class registry)
- The geometry variant tag
- Logging
"""

from common.constants import GeodeticLimits, Srid, DEFAULT_SRID, MAX_NESTING_DEPTH
from common.exceptions import (
    SpatialError,
    InvalidCoordinate,
    InvalidLongitude,
    InvalidLatitude,
    InvalidGeometryStructure,
    InvalidBoundingBoxPoints,
    ParseError,
    TypeMismatch,
    UnsupportedGeometryType,
    InvalidArgument,
)
from common.types import GeometryType
from common.config import (
    SpatialConfig,
    get_default_config,
    set_default_config,
    resolve_srid,
)
from common.logging_config import get_logger, set_log_level

__all__ = [
    "GeodeticLimits",
    "Srid",
    "DEFAULT_SRID",
    "MAX_NESTING_DEPTH",
    "SpatialError",
    "InvalidCoordinate",
    "InvalidLongitude",
    "InvalidLatitude",
    "InvalidGeometryStructure",
    "InvalidBoundingBoxPoints",
    "ParseError",
    "TypeMismatch",
    "UnsupportedGeometryType",
    "InvalidArgument",
    "GeometryType",
    "SpatialConfig",
    "get_default_config",
    "set_default_config",
    "resolve_srid",
    "get_logger",
    "set_log_level",
]
