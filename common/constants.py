"""
Geodetic and Encoding Constants for the Spatial Value Library.

This module provides the numeric limits and well-known identifiers used
throughout the geometry model and its codecs. Every limit is defined with
its unit and provenance so that range checks elsewhere never hard-code
magic numbers.

References
----------
- OGC 06-103r4: Simple Feature Access, Part 1 (WKT/WKB)
- PostGIS EWKB extension (SRID flag on the geometry type code)
- RFC 7946: The GeoJSON Format
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A named constant with unit and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    unit : str
        The unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    unit: str
    source: str
    description: str


class GeodeticLimits:
    """Registry of coordinate-domain limits.

    Longitude is a cylindrical domain that wraps at the antimeridian;
    latitude is bounded and clamps at the poles.
    """

    # =========================================================================
    # Coordinate ranges (WGS84 geographic degrees)
    # =========================================================================

    LONGITUDE_MIN: Final[Constant] = Constant(
        value=-180.0,
        unit="degree",
        source="RFC 7946, section 4",
        description="Westernmost longitude"
    )

    LONGITUDE_MAX: Final[Constant] = Constant(
        value=180.0,
        unit="degree",
        source="RFC 7946, section 4",
        description="Easternmost longitude"
    )

    LATITUDE_MIN: Final[Constant] = Constant(
        value=-90.0,
        unit="degree",
        source="RFC 7946, section 4",
        description="South pole latitude"
    )

    LATITUDE_MAX: Final[Constant] = Constant(
        value=90.0,
        unit="degree",
        source="RFC 7946, section 4",
        description="North pole latitude"
    )

    FULL_CIRCLE: Final[Constant] = Constant(
        value=360.0,
        unit="degree",
        source="definition",
        description="Length of the longitude domain before it wraps"
    )

    @classmethod
    def get_all_limits(cls) -> dict:
        """Return all limits as a dictionary keyed by name."""
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), Constant)
        }


class Srid(IntEnum):
    """Well-known spatial reference identifiers."""

    UNSPECIFIED = 0
    WGS84 = 4326
    WEB_MERCATOR = 3857


DEFAULT_SRID: Final[int] = Srid.UNSPECIFIED.value


# =============================================================================
# WKB layout
# =============================================================================

WKB_BIG_ENDIAN: Final[int] = 0
WKB_LITTLE_ENDIAN: Final[int] = 1

# EWKB flag bits on the 32-bit geometry type code
WKB_SRID_FLAG: Final[int] = 0x20000000
WKB_Z_FLAG: Final[int] = 0x80000000
WKB_M_FLAG: Final[int] = 0x40000000

# ISO SQL/MM dimension offsets (1000 = Z, 2000 = M, 3000 = ZM)
WKB_ISO_DIMENSION_STEP: Final[int] = 1000

WKB_HEADER_SIZE: Final[int] = 5  # byte order + type code
WKB_UINT32_SIZE: Final[int] = 4
WKB_DOUBLE_SIZE: Final[int] = 8


# =============================================================================
# Decoding limits
# =============================================================================

# Deepest GeometryCollection nesting accepted by the decoders
MAX_NESTING_DEPTH: Final[int] = 64
