"""
Validation Framework for the spatial value library.

This module provides coordinate range checks.
"""

from validation.coordinates import (
    is_valid_latitude,
    is_valid_longitude,
    validate_latitude,
    validate_longitude,
)

__all__ = [
    "is_valid_latitude",
    "is_valid_longitude",
    "validate_latitude",
    "validate_longitude",
]
