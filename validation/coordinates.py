"""
Coordinate Range Checks.

This module provides the range checks applied to every longitude/latitude
pair before a point is constructed.

Check Categories
----------------
1. Scalar checks (raise on the first violation)
2. Scalar predicates (return a boolean)
"""

from typing import Any

import numpy as np

from common.constants import GeodeticLimits
from common.exceptions import InvalidArgument, InvalidLatitude, InvalidLongitude
LON_MIN = GeodeticLimits.LONGITUDE_MIN.value
LON_MAX = GeodeticLimits.LONGITUDE_MAX.value
LAT_MIN = GeodeticLimits.LATITUDE_MIN.value
LAT_MAX = GeodeticLimits.LATITUDE_MAX.value


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidArgument(f"Coordinate must be a number, got {value!r}")
    return float(value)


def is_valid_longitude(longitude: float) -> bool:
    """Whether ``longitude`` lies in [-180, 180]. NaN is never valid."""
    return LON_MIN <= longitude <= LON_MAX


def is_valid_latitude(latitude: float) -> bool:
    """Whether ``latitude`` lies in [-90, 90]. NaN is never valid."""
    return LAT_MIN <= latitude <= LAT_MAX


def validate_longitude(longitude: Any) -> float:
    """Check a longitude and return it as a float.

    Parameters
    ----------
    longitude : float
        Longitude in degrees.

    Returns
    -------
    float
        The validated longitude.

    Raises
    ------
    InvalidArgument
        If the value is not numeric.
    InvalidLongitude
        If the value is outside [-180, 180] or not finite.
    """
    value = _as_float(longitude)
    if not is_valid_longitude(value):
        raise InvalidLongitude(longitude)
    return value


def validate_latitude(latitude: Any) -> float:
    """Check a latitude and return it as a float.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.

    Returns
    -------
    float
        The validated latitude.

    Raises
    ------
    InvalidArgument
        If the value is not numeric.
    InvalidLatitude
        If the value is outside [-90, 90] or not finite.
    """
    value = _as_float(latitude)
    if not is_valid_latitude(value):
        raise InvalidLatitude(latitude)
    return value
