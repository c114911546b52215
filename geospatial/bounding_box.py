"""
Bounding Box Engine.

This module computes the minimal longitude/latitude box enclosing a set of
points and converts boxes back into Polygon/MultiPolygon geometry.

Domain
------
Longitude is cylindrical: it wraps at the antimeridian (+/-180 degrees).
Latitude is bounded: it stops at the poles. A box is therefore described by
its southwest corner (``left_bottom``) and northeast corner (``right_top``)
where ``left`` may be numerically greater than ``right``; such a box spans
the antimeridian.

Shortest Longitude Arc
----------------------
For unique sorted longitudes, the tightest enclosing arc is the complement
of the widest empty gap between neighbours (the wrap-around gap from the
last longitude back to the first included). The box's ``right`` edge is the
longitude just before that gap and ``left`` the one just after it. This
picks up clusters straddling the antimeridian without special-casing them:

    {175, -175, 170}  ->  left=170, right=-175  (crosses)

References
----------
- RFC 7946, section 5.2: The Antimeridian
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple, Union
import json
import math

import numpy as np
from numpy.typing import NDArray

from common.constants import GeodeticLimits
from common.exceptions import (
    InvalidArgument,
    InvalidBoundingBoxPoints,
    UnsupportedGeometryType,
)
from common.logging_config import get_logger
from common.types import GeometryType
from geospatial.geometries import (
    COMPOSITE_TYPES,
    Geometry,
    LineString,
    MultiPolygon,
    Point,
    Polygon,
)

logger = get_logger(__name__)

LON_MIN = GeodeticLimits.LONGITUDE_MIN.value
LON_MAX = GeodeticLimits.LONGITUDE_MAX.value
LAT_MIN = GeodeticLimits.LATITUDE_MIN.value
LAT_MAX = GeodeticLimits.LATITUDE_MAX.value
FULL_CIRCLE = GeodeticLimits.FULL_CIRCLE.value

BOX_KEYS = ('left', 'bottom', 'right', 'top')


def normalize_longitude(longitude: float) -> float:
    """Wrap a longitude into [-180, 180] by whole turns.

    Values already in range are returned unchanged (180 stays 180).
    """
    while longitude > LON_MAX:
        longitude -= FULL_CIRCLE
    while longitude < LON_MIN:
        longitude += FULL_CIRCLE
    return longitude


def find_shortest_longitude_arc(longitudes: Iterable[float]) -> Tuple[float, float]:
    """Find the narrowest arc containing every longitude.

    Parameters
    ----------
    longitudes : iterable of float
        Longitudes in degrees, in [-180, 180]. Duplicates are allowed.

    Returns
    -------
    Tuple[float, float]
        ``(left, right)``. ``left > right`` means the arc wraps across the
        antimeridian.

    Notes
    -----
    Ties between equally wide gaps go to the first one in ascending order.
    """
    values: NDArray[np.float64] = np.unique(np.asarray(list(longitudes), dtype=np.float64))

    if values.size == 0:
        raise InvalidArgument("cannot find longitude arc of empty longitudes")
    if values.size == 1:
        return float(values[0]), float(values[0])

    # gaps[i] is the empty arc after values[i]; the last one wraps to values[0]
    gaps = np.empty_like(values)
    gaps[:-1] = np.diff(values)
    gaps[-1] = (values[0] + FULL_CIRCLE) - values[-1]

    right_index = int(np.argmax(gaps))
    left_index = (right_index + 1) % values.size

    return float(values[left_index]), float(values[right_index])


@dataclass(frozen=True)
class BoundingBox:
    """Longitude/latitude extent given by its southwest and northeast corners.

    Attributes
    ----------
    left_bottom : Point
        Southwest corner (left longitude, bottom latitude).
    right_top : Point
        Northeast corner (right longitude, top latitude).

    Notes
    -----
    Only the latitudes are ordered: ``right_top.latitude`` must exceed
    ``left_bottom.latitude``. A left longitude greater than the right one
    describes a box that crosses the antimeridian.

    Examples
    --------
    >>> box = BoundingBox(Point(170, 50), Point(-170, 60))
    >>> box.crosses_antimeridian()
    True
    >>> box.to_array()
    {'left': 170.0, 'bottom': 50.0, 'right': -170.0, 'top': 60.0}
    """
    left_bottom: Point
    right_top: Point

    def __post_init__(self):
        if not isinstance(self.left_bottom, Point) or not isinstance(self.right_top, Point):
            raise InvalidBoundingBoxPoints("Bounding box corners must be Points")
        if self.right_top.latitude <= self.left_bottom.latitude:
            raise InvalidBoundingBoxPoints(
                "The latitude of the bottom point must be less than the latitude of the top point"
            )

    def __str__(self) -> str:
        return self.to_json()

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    @property
    def left(self) -> float:
        return self.left_bottom.longitude

    @property
    def bottom(self) -> float:
        return self.left_bottom.latitude

    @property
    def right(self) -> float:
        return self.right_top.longitude

    @property
    def top(self) -> float:
        return self.right_top.latitude

    @property
    def srid(self) -> int:
        return self.left_bottom.srid

    def get_left_bottom(self) -> Point:
        return self.left_bottom

    def get_right_top(self) -> Point:
        return self.right_top

    def crosses_antimeridian(self) -> bool:
        """Whether the box wraps across the +/-180 longitude line."""
        return self.left > self.right

    @property
    def longitude_span(self) -> float:
        """Eastward extent from ``left`` to ``right`` in degrees."""
        return _longitude_span(self.left, self.right)

    @property
    def latitude_span(self) -> float:
        return self.top - self.bottom

    # ------------------------------------------------------------------
    # Construction from geometry
    # ------------------------------------------------------------------

    @classmethod
    def from_geometry(cls, geometry: Geometry, min_padding: float = 0.0) -> 'BoundingBox':
        """Minimal box around a geometry's points.

        Parameters
        ----------
        geometry : Geometry
            A Point, or any multi-part/ringed variant or GeometryCollection.
        min_padding : float
            Minimum size of the box in each direction, in degrees.

        Raises
        ------
        UnsupportedGeometryType
            If ``geometry`` is not a known geometry variant.
        """
        geometry_type = getattr(geometry, 'geometry_type', None)

        if geometry_type is GeometryType.POINT:
            return cls.from_points([geometry], min_padding)

        if geometry_type in COMPOSITE_TYPES:
            return cls.from_points(geometry.get_points(), min_padding)

        raise UnsupportedGeometryType(
            f"cannot create bounding box from {type(geometry).__name__}"
        )

    @classmethod
    def from_points(cls, points: Iterable[Point], min_padding: float = 0.0) -> 'BoundingBox':
        """Minimal antimeridian-aware box around a set of points.

        Parameters
        ----------
        points : iterable of Point
            Points to enclose.
        min_padding : float
            Minimum longitude and latitude extent in degrees (>= 0). A
            narrower extent is widened symmetrically; longitudes wrap around
            the antimeridian, latitudes clamp at the poles. A padding of 360
            or more yields the full longitude range [-180, 180].

        Returns
        -------
        BoundingBox
            The enclosing box. Corners take the SRID of the first point.

        Raises
        ------
        InvalidArgument
            If ``min_padding`` is negative or not finite, ``points`` is
            empty, or a member is not a Point.
        InvalidBoundingBoxPoints
            If all points share one latitude and no padding widens it.
        """
        if isinstance(min_padding, bool) or not isinstance(min_padding, (int, float)):
            raise InvalidArgument(f"minPadding must be a number, got {min_padding!r}")
        if not math.isfinite(min_padding):
            raise InvalidArgument("minPadding must be finite")
        if min_padding < 0:
            raise InvalidArgument("minPadding must be non-negative")

        points = list(points)
        if not points:
            raise InvalidArgument("cannot create bounding box from empty points")
        for point in points:
            if not isinstance(point, Point):
                raise InvalidArgument(
                    f"cannot create bounding box from {type(point).__name__}, Point expected"
                )

        coordinates = np.array([p.get_coordinates() for p in points], dtype=np.float64)
        bottom = float(np.min(coordinates[:, 1]))
        top = float(np.max(coordinates[:, 1]))

        left, right = find_shortest_longitude_arc(coordinates[:, 0])

        lon_span = _longitude_span(left, right)
        if min_padding >= FULL_CIRCLE:
            left, right = LON_MIN, LON_MAX
            logger.debug(f"Padding {min_padding:.6f} covers every longitude")
        elif lon_span < min_padding:
            half_padding = (min_padding - lon_span) / 2
            left = normalize_longitude(left - half_padding)
            right = normalize_longitude(right + half_padding)
            logger.debug(f"Padded longitude span {lon_span:.6f} to {min_padding:.6f}")

        lat_span = top - bottom
        if lat_span < min_padding:
            half_padding = (min_padding - lat_span) / 2
            bottom = max(LAT_MIN, bottom - half_padding)
            top = min(LAT_MAX, top + half_padding)
            logger.debug(f"Padded latitude span {lat_span:.6f} to {min_padding:.6f}")

        srid = points[0].srid
        return cls(Point(left, bottom, srid), Point(right, top, srid))

    # ------------------------------------------------------------------
    # Conversion to geometry
    # ------------------------------------------------------------------

    def to_polygon(self) -> Polygon:
        """The box as a single counter-clockwise Polygon.

        Raises
        ------
        InvalidArgument
            If the box crosses the antimeridian; use ``to_geometry``.
        """
        if self.crosses_antimeridian():
            raise InvalidArgument(
                "Cannot convert antimeridian-crossing bounding box to single Polygon. "
                "Use to_geometry() instead."
            )
        return self._create_polygon(self.left, self.right)

    def to_geometry(self) -> Union[Polygon, MultiPolygon]:
        """The box as a Polygon, or a two-part MultiPolygon split at the antimeridian."""
        if not self.crosses_antimeridian():
            return self._create_polygon(self.left, self.right)

        return MultiPolygon(
            [
                self._create_polygon(self.left, LON_MAX),
                self._create_polygon(LON_MIN, self.right),
            ],
            srid=self.srid,
        )

    def _create_polygon(self, left: float, right: float) -> Polygon:
        bottom, top, srid = self.bottom, self.top, self.srid

        # Counter-clockwise exterior ring (RFC 7946)
        ring = LineString(
            [
                Point(left, bottom, srid),
                Point(right, bottom, srid),
                Point(right, top, srid),
                Point(left, top, srid),
                Point(left, bottom, srid),
            ],
            srid=srid,
        )
        return Polygon([ring], srid=srid)

    # ------------------------------------------------------------------
    # Array / JSON form
    # ------------------------------------------------------------------

    def to_array(self) -> Dict[str, float]:
        """``{"left", "bottom", "right", "top"}`` mapping of floats."""
        return {
            'left': self.left,
            'bottom': self.bottom,
            'right': self.right,
            'top': self.top,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_array(), separators=(',', ':'))

    @classmethod
    def from_array(cls, data: Dict[str, float], srid: Optional[int] = None) -> 'BoundingBox':
        """Build a box from a ``{"left", "bottom", "right", "top"}`` mapping.

        Raises
        ------
        InvalidArgument
            If a key is missing or its value is not numeric.
        """
        if not isinstance(data, dict):
            raise InvalidArgument(
                f"Bounding box array must be a mapping, {type(data).__name__} given."
            )

        missing = [key for key in BOX_KEYS if data.get(key) is None]
        if missing:
            raise InvalidArgument("Array must contain keys: left, bottom, right, top")

        values = {}
        for key in BOX_KEYS:
            values[key] = _to_number(key, data[key])

        return cls(
            Point(values['left'], values['bottom'], srid),
            Point(values['right'], values['top'], srid),
        )

    @classmethod
    def from_json(cls, text: str, srid: Optional[int] = None) -> 'BoundingBox':
        """Parse the JSON produced by ``to_json``."""
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"Invalid JSON for BoundingBox: {e}") from e
        return cls.from_array(data, srid)


def _longitude_span(left: float, right: float) -> float:
    if left > right:
        return (LON_MAX - left) + (right - LON_MIN)
    return right - left


def _to_number(key: str, value) -> float:
    if isinstance(value, bool):
        raise InvalidArgument(f"Bounding box value '{key}' must be numeric, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as e:
            raise InvalidArgument(
                f"Bounding box value '{key}' must be numeric, got {value!r}"
            ) from e
    raise InvalidArgument(f"Bounding box value '{key}' must be numeric, got {value!r}")
