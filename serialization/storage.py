"""
Storage format adapter.

Persistence collaborators store geometries and bounding boxes either in a
native geometry column (WKB) or as JSON text. The serializers here own the
format choice and the conversion in both directions, so the collaborator
only moves the returned bytes or text.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from common.config import SpatialConfig
from common.exceptions import InvalidArgument, TypeMismatch
from common.logging_config import get_logger
from common.types import GeometryType
from geospatial.bounding_box import BoundingBox
from geospatial.geometries import Geometry
from serialization.geojson import GeoJsonCodec
from serialization.wkb import WkbCodec

logger = get_logger(__name__)

StoredValue = Union[bytes, str]


class StorageFormat(str, Enum):
    """How a value is persisted."""

    GEOMETRY = "geometry"  # native column, WKB
    JSON = "json"  # text column, JSON

    @classmethod
    def parse(cls, value: Union['StorageFormat', str]) -> 'StorageFormat':
        try:
            return cls(value)
        except ValueError:
            supported = ", ".join(f.value for f in cls)
            raise InvalidArgument(
                f'Invalid format "{value}". Supported formats: {supported}'
            ) from None


class GeometrySerializer:
    """Serializer for a column holding one geometry variant.

    Parameters
    ----------
    geometry_class : type
        Variant stored in the column. ``Geometry`` accepts any variant.
    format : StorageFormat or str
        ``"geometry"`` (WKB) or ``"json"`` (structured JSON text).
    config : SpatialConfig, optional
        Configuration passed to the codecs.
    """

    def __init__(self, geometry_class: type = Geometry,
                 format: Union[StorageFormat, str] = StorageFormat.GEOMETRY,
                 config: Optional[SpatialConfig] = None):
        if not (isinstance(geometry_class, type) and issubclass(geometry_class, Geometry)):
            raise InvalidArgument(f"{geometry_class!r} is not a Geometry class")

        self.geometry_class = geometry_class
        self.format = StorageFormat.parse(format)
        self._wkb = WkbCodec(config)
        self._json = GeoJsonCodec(config)

    def serialize(self, value: Optional[Geometry]) -> Optional[StoredValue]:
        """Convert a geometry into its stored form.

        Raises
        ------
        TypeMismatch
            If ``value`` is not an instance of the column's variant.
        """
        if value is None:
            return None
        if not isinstance(value, self.geometry_class):
            raise TypeMismatch(self.geometry_class.__name__, type(value).__name__)

        if self.format is StorageFormat.JSON:
            return self._json.encode_json(value)
        return self._wkb.encode(value, include_srid=True)

    def deserialize(self, value: Optional[StoredValue]) -> Optional[Geometry]:
        """Convert a stored value back into a geometry.

        Raises
        ------
        ParseError
            If the stored value is malformed.
        TypeMismatch
            If it holds another variant.
        """
        if value is None:
            return None

        if self.format is StorageFormat.JSON:
            return self._json.decode_json(value, expected=self.geometry_class)
        return self._wkb.decode(value, expected=self.geometry_class)


class BoundingBoxSerializer:
    """Serializer for a column holding a BoundingBox.

    In ``"geometry"`` format the box is stored as its ``to_geometry()``
    Polygon (or MultiPolygon when it crosses the antimeridian); reading it
    back recomputes the box from that geometry's points. In ``"json"``
    format the ``{left, bottom, right, top}`` mapping is stored as text.
    """

    def __init__(self, format: Union[StorageFormat, str] = StorageFormat.GEOMETRY,
                 config: Optional[SpatialConfig] = None):
        self.format = StorageFormat.parse(format)
        self._wkb = WkbCodec(config)

    def serialize(self, value: Union[BoundingBox, Dict[str, Any], None]) -> Optional[StoredValue]:
        """Convert a box (or its array form) into its stored form.

        Raises
        ------
        InvalidArgument
            If ``value`` is a mapping with missing or non-numeric keys.
        TypeMismatch
            If ``value`` is neither a BoundingBox nor a mapping.
        """
        if value is None:
            return None
        if isinstance(value, dict):
            value = BoundingBox.from_array(value)
        if not isinstance(value, BoundingBox):
            raise TypeMismatch(BoundingBox.__name__, type(value).__name__)

        if self.format is StorageFormat.JSON:
            return value.to_json()
        return self._wkb.encode(value.to_geometry(), include_srid=True)

    def deserialize(self, value: Optional[StoredValue]) -> Optional[BoundingBox]:
        """Convert a stored value back into a BoundingBox.

        Raises
        ------
        InvalidArgument
            If stored JSON is malformed or incomplete.
        ParseError
            If stored WKB is malformed.
        TypeMismatch
            If stored WKB holds something other than a Polygon or MultiPolygon.
        """
        if value is None:
            return None

        if self.format is StorageFormat.JSON:
            return BoundingBox.from_json(value)

        geometry = self._wkb.decode(value)
        if geometry.geometry_type not in (GeometryType.POLYGON, GeometryType.MULTI_POLYGON):
            raise TypeMismatch("Polygon or MultiPolygon", type(geometry).__name__)
        return BoundingBox.from_geometry(geometry)
