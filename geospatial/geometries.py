"""
Geometry Value Model.

This module implements the OGC Simple Features geometry variants as
immutable value objects: Point, LineString, Polygon, MultiPoint,
MultiLineString, MultiPolygon and GeometryCollection.

Model
-----
Each variant carries a ``GeometryType`` tag. Codecs, ``get_points`` and the
bounding-box engine dispatch on that tag, so the set of variants is closed:
a caller-supplied subclass (registered through ``SpatialConfig.register``)
keeps the tag, and with it the encoding rules, of the variant it extends.

Invariants (checked at construction)
------------------------------------
- Point: longitude in [-180, 180], latitude in [-90, 90].
- LineString: at least 2 Points.
- Polygon: at least 1 LineString ring. Ring closedness is not checked.
- MultiPoint / MultiLineString / MultiPolygon: at least 1 component, all of
  the matching single variant.
- GeometryCollection: any number of geometries of any variant.
- A composite owns its SRID: every component, down to the leaf Points, is
  re-stamped with it. An omitted SRID is taken from the first component,
  else from the configuration.

Values are frozen dataclasses; equality compares variant, coordinates,
components and SRID. Nothing here mutates a geometry after construction.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import (
    Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union,
    TYPE_CHECKING,
)

from common.config import SpatialConfig, resolve_srid
from common.constants import Srid
from common.exceptions import InvalidGeometryStructure, UnsupportedGeometryType
from common.logging_config import get_logger
from common.types import Coordinates, GeometryType, StructuredGeometry
from validation.coordinates import validate_latitude, validate_longitude

if TYPE_CHECKING:
    from geospatial.bounding_box import BoundingBox

logger = get_logger(__name__)

SridLike = Union[int, Srid, None]

# Variants whose value is an ordered list of component geometries
COMPOSITE_TYPES = frozenset({
    GeometryType.LINE_STRING,
    GeometryType.POLYGON,
    GeometryType.MULTI_POINT,
    GeometryType.MULTI_LINE_STRING,
    GeometryType.MULTI_POLYGON,
    GeometryType.GEOMETRY_COLLECTION,
})


class Geometry:
    """Base class of every geometry variant.

    Subclasses set ``geometry_type``. The serialization helpers defined here
    delegate to the codecs in the ``serialization`` package using the
    process-wide configuration; use the codec classes directly to thread an
    explicit ``SpatialConfig``.
    """

    geometry_type: ClassVar[GeometryType]
    srid: int

    @property
    def type_name(self) -> str:
        """Structured-form name of the variant, e.g. ``"Polygon"``."""
        return self.geometry_type.value

    def get_coordinates(self) -> Coordinates:
        """Nested coordinate arrays in structured-form shape."""
        raise NotImplementedError

    def get_points(self) -> List['Point']:
        """All leaf Points in order, descending through rings and components."""
        return list(iter_points(self))

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def to_wkt(self) -> str:
        """Well-Known Text form (SRID is not embedded)."""
        from serialization.wkt import WktCodec

        return WktCodec().encode(self)

    def to_wkb(self, byte_order: Optional[int] = None, include_srid: Optional[bool] = None) -> bytes:
        """Well-Known Binary form.

        Parameters
        ----------
        byte_order : int, optional
            ``ByteOrder.LITTLE_ENDIAN`` (default) or ``ByteOrder.BIG_ENDIAN``.
        include_srid : bool, optional
            Write the extended SRID header. By default it is written only
            when the SRID is non-zero.
        """
        from serialization.wkb import ByteOrder, WkbCodec

        if byte_order is None:
            byte_order = ByteOrder.LITTLE_ENDIAN
        return WkbCodec().encode(self, byte_order=byte_order, include_srid=include_srid)

    def to_wkb_hex(self, byte_order: Optional[int] = None, include_srid: Optional[bool] = None) -> str:
        """Upper-case hexadecimal rendering of ``to_wkb``."""
        return self.to_wkb(byte_order=byte_order, include_srid=include_srid).hex().upper()

    def to_array(self) -> StructuredGeometry:
        """Structured form: ``{"type": ..., "coordinates": ...}``."""
        from serialization.geojson import GeoJsonCodec

        return GeoJsonCodec().encode(self)

    def to_json(self) -> str:
        """Structured form as JSON text."""
        from serialization.geojson import GeoJsonCodec

        return GeoJsonCodec().encode_json(self)

    def to_feature_collection_array(self) -> StructuredGeometry:
        """Wrap this geometry (or each member of a collection) in a FeatureCollection."""
        from serialization.geojson import GeoJsonCodec

        return GeoJsonCodec().encode_feature_collection(self)

    def to_feature_collection_json(self) -> str:
        """``to_feature_collection_array`` as JSON text."""
        from serialization.geojson import GeoJsonCodec

        return GeoJsonCodec().encode_feature_collection_json(self)

    def to_bounding_box(self, min_padding: float = 0.0) -> 'BoundingBox':
        """Minimal enclosing box of this geometry's points."""
        from geospatial.bounding_box import BoundingBox

        return BoundingBox.from_geometry(self, min_padding)

    # ------------------------------------------------------------------
    # Decoding (the calling class is the expected variant)
    # ------------------------------------------------------------------

    @classmethod
    def from_wkt(cls, wkt: str, srid: SridLike = None,
                 config: Optional[SpatialConfig] = None) -> 'Geometry':
        """Parse WKT, requiring the result to be an instance of ``cls``.

        Raises
        ------
        ParseError
            If the text is malformed.
        TypeMismatch
            If the text encodes another variant.
        """
        from serialization.wkt import WktCodec

        return WktCodec(config).decode(wkt, srid=srid, expected=cls)

    @classmethod
    def from_wkb(cls, wkb: Union[bytes, bytearray, memoryview, str], srid: SridLike = None,
                 config: Optional[SpatialConfig] = None) -> 'Geometry':
        """Decode WKB (raw bytes or hex text), requiring an instance of ``cls``."""
        from serialization.wkb import WkbCodec

        return WkbCodec(config).decode(wkb, srid=srid, expected=cls)

    @classmethod
    def from_wkb_hex(cls, text: str, srid: SridLike = None,
                     config: Optional[SpatialConfig] = None) -> 'Geometry':
        from serialization.wkb import WkbCodec

        return WkbCodec(config).decode_hex(text, srid=srid, expected=cls)

    @classmethod
    def from_json(cls, text: str, srid: SridLike = None,
                  config: Optional[SpatialConfig] = None) -> 'Geometry':
        """Decode structured JSON text, requiring an instance of ``cls``."""
        from serialization.geojson import GeoJsonCodec

        return GeoJsonCodec(config).decode_json(text, srid=srid, expected=cls)

    @classmethod
    def from_array(cls, data: StructuredGeometry, srid: SridLike = None,
                   config: Optional[SpatialConfig] = None) -> 'Geometry':
        """Decode a structured mapping, requiring an instance of ``cls``."""
        from serialization.geojson import GeoJsonCodec

        return GeoJsonCodec(config).decode(data, srid=srid, expected=cls)


@dataclass(frozen=True)
class Point(Geometry):
    """A single longitude/latitude position.

    Attributes
    ----------
    longitude : float
        Degrees east, in [-180, 180].
    latitude : float
        Degrees north, in [-90, 90].
    srid : int, optional
        Spatial reference identifier. Defaults to the configured SRID.

    Examples
    --------
    >>> Point(180, 0).get_coordinates()
    [180.0, 0.0]
    """

    geometry_type: ClassVar[GeometryType] = GeometryType.POINT

    longitude: float
    latitude: float
    srid: SridLike = None

    def __post_init__(self):
        object.__setattr__(self, 'latitude', validate_latitude(self.latitude))
        object.__setattr__(self, 'longitude', validate_longitude(self.longitude))
        object.__setattr__(self, 'srid', resolve_srid(self.srid))

    def get_coordinates(self) -> List[float]:
        return [self.longitude, self.latitude]


@dataclass(frozen=True)
class GeometryComposite(Geometry):
    """A geometry made of an ordered sequence of component geometries.

    Subclasses declare the component variant they accept
    (``component_type``; ``None`` accepts any) and the minimum number of
    components (``min_components``).

    Components are exposed through the read-only sequence protocol:
    ``len(g)``, ``g[i]`` and iteration.
    """

    component_type: ClassVar[Optional[GeometryType]] = None
    min_components: ClassVar[int] = 1

    geometries: Tuple[Geometry, ...]
    srid: SridLike = None

    def __post_init__(self):
        geometries = self.geometries
        if isinstance(geometries, (str, bytes, dict, Geometry)) or not isinstance(geometries, Sequence):
            raise InvalidGeometryStructure(
                f"{type(self).__name__} expects a sequence of geometries, "
                f"got {type(geometries).__name__}"
            )

        geometries = tuple(geometries)
        for geometry in geometries:
            self._check_component(geometry)

        if len(geometries) < self.min_components:
            raise InvalidGeometryStructure(
                f"{type(self).__name__} must contain at least {self.min_components} "
                f"{'entries' if self.min_components > 1 else 'entry'}"
            )

        if self.srid is None and geometries:
            srid = geometries[0].srid
        else:
            srid = resolve_srid(self.srid)

        geometries = tuple(
            geometry if geometry.srid == srid else replace(geometry, srid=srid)
            for geometry in geometries
        )

        object.__setattr__(self, 'geometries', geometries)
        object.__setattr__(self, 'srid', srid)

    def _check_component(self, geometry: Any) -> None:
        if not isinstance(geometry, Geometry):
            raise InvalidGeometryStructure(
                f"{type(self).__name__} must be a collection of Geometry, "
                f"got {type(geometry).__name__}"
            )
        if self.component_type is not None and geometry.geometry_type is not self.component_type:
            raise InvalidGeometryStructure(
                f"{type(self).__name__} must be a collection of {self.component_type.value}, "
                f"got {geometry.type_name}"
            )

    def get_coordinates(self) -> List[Any]:
        return [geometry.get_coordinates() for geometry in self.geometries]

    def get_geometries(self) -> Tuple[Geometry, ...]:
        return self.geometries

    def __len__(self) -> int:
        return len(self.geometries)

    def __getitem__(self, index):
        return self.geometries[index]

    def __iter__(self) -> Iterator[Geometry]:
        return iter(self.geometries)


class LineString(GeometryComposite):
    """Ordered sequence of at least two Points."""

    geometry_type: ClassVar[GeometryType] = GeometryType.LINE_STRING
    component_type: ClassVar[Optional[GeometryType]] = GeometryType.POINT
    min_components: ClassVar[int] = 2


class Polygon(GeometryComposite):
    """One exterior ring followed by optional interior rings, as LineStrings.

    Rings are conventionally closed (first point equals last) but this is
    not enforced.
    """

    geometry_type: ClassVar[GeometryType] = GeometryType.POLYGON
    component_type: ClassVar[Optional[GeometryType]] = GeometryType.LINE_STRING


class MultiPoint(GeometryComposite):
    geometry_type: ClassVar[GeometryType] = GeometryType.MULTI_POINT
    component_type: ClassVar[Optional[GeometryType]] = GeometryType.POINT


class MultiLineString(GeometryComposite):
    geometry_type: ClassVar[GeometryType] = GeometryType.MULTI_LINE_STRING
    component_type: ClassVar[Optional[GeometryType]] = GeometryType.LINE_STRING


class MultiPolygon(GeometryComposite):
    geometry_type: ClassVar[GeometryType] = GeometryType.MULTI_POLYGON
    component_type: ClassVar[Optional[GeometryType]] = GeometryType.POLYGON


class GeometryCollection(GeometryComposite):
    """Heterogeneous, possibly empty, sequence of geometries."""

    geometry_type: ClassVar[GeometryType] = GeometryType.GEOMETRY_COLLECTION
    component_type: ClassVar[Optional[GeometryType]] = None
    min_components: ClassVar[int] = 0


def iter_points(geometry: Geometry) -> Iterator[Point]:
    """Yield the leaf Points of ``geometry`` depth-first, in order.

    Raises
    ------
    UnsupportedGeometryType
        If ``geometry`` is not one of the known variants.
    """
    geometry_type = getattr(geometry, 'geometry_type', None)

    if geometry_type is GeometryType.POINT:
        yield geometry
    elif geometry_type in COMPOSITE_TYPES:
        for component in geometry.geometries:
            yield from iter_points(component)
    else:
        raise UnsupportedGeometryType(
            f"Cannot collect points from {type(geometry).__name__}"
        )


BUILTIN_CLASSES: Dict[GeometryType, type] = {
    GeometryType.POINT: Point,
    GeometryType.LINE_STRING: LineString,
    GeometryType.POLYGON: Polygon,
    GeometryType.MULTI_POINT: MultiPoint,
    GeometryType.MULTI_LINE_STRING: MultiLineString,
    GeometryType.MULTI_POLYGON: MultiPolygon,
    GeometryType.GEOMETRY_COLLECTION: GeometryCollection,
}
