"""
Error taxonomy for the spatial value library.

Every error is raised synchronously at the construction or parse boundary.
All kinds derive from ``SpatialError`` (itself a ``ValueError``) so callers
can either catch everything the library raises or branch on the specific
kind to tell caller mistakes from malformed external data.
"""

from typing import Any


class SpatialError(ValueError):
    """Base class for all errors raised by this library."""


class InvalidCoordinate(SpatialError):
    """A longitude or latitude lies outside its declared range."""


class InvalidLongitude(InvalidCoordinate):
    """Longitude outside [-180, 180]."""

    def __init__(self, longitude: Any):
        self.longitude = longitude
        super().__init__(f"Longitude must be between -180 and 180, got: {longitude}")


class InvalidLatitude(InvalidCoordinate):
    """Latitude outside [-90, 90]."""

    def __init__(self, latitude: Any):
        self.latitude = latitude
        super().__init__(f"Latitude must be between -90 and 90, got: {latitude}")


class InvalidGeometryStructure(SpatialError):
    """Wrong component count or component variant for a geometry."""


class InvalidBoundingBoxPoints(SpatialError):
    """Bounding box corners violate the latitude ordering invariant."""


class ParseError(SpatialError):
    """Malformed WKT, WKB or structured input."""


class TypeMismatch(SpatialError):
    """A decoded geometry is not the variant the caller asked for."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected}, {actual} given.")


class UnsupportedGeometryType(SpatialError):
    """Bounding box derivation requested on an unsupported value."""


class InvalidArgument(SpatialError):
    """Bad argument supplied by the caller."""
