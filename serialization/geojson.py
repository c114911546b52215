"""
Structured (GeoJSON-like) codec.

Forms
-----
- ``{"type": "<Variant>", "coordinates": <nested arrays>}`` for every
  variant except GeometryCollection.
- ``{"type": "GeometryCollection", "geometries": [<geometry>, ...]}``.
- ``{"type": "FeatureCollection", "features": [<feature>, ...]}`` on input:
  each feature's ``geometry`` is extracted, properties are dropped, and the
  result is a GeometryCollection.
- ``{"type": "Feature", "geometry": <geometry>}`` on input: the geometry.

Positions are ``[longitude, latitude]``; exactly two numbers. The SRID is
not part of this form and is supplied by the caller or the configuration.
"""

from typing import Any, Dict, List, Optional, Tuple, Union
import json

from common.constants import Srid
from common.exceptions import InvalidGeometryStructure, ParseError
from common.logging_config import get_logger
from common.types import GeometryType, StructuredGeometry
from geospatial.geometries import Geometry, Point
from serialization.base import GeometryCodec

logger = get_logger(__name__)

FEATURE = "Feature"
FEATURE_COLLECTION = "FeatureCollection"

_JSON_SEPARATORS = (',', ':')


class GeoJsonCodec(GeometryCodec):
    """Nested-array <-> Geometry conversion.

    Examples
    --------
    >>> codec = GeoJsonCodec()
    >>> codec.decode({"type": "Point", "coordinates": [180, 0]}).get_coordinates()
    [180.0, 0.0]
    """

    @property
    def format_name(self) -> str:
        return "GeoJSON"

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, geometry: Geometry) -> StructuredGeometry:
        """Structured mapping for ``geometry``."""
        geometry_type = geometry.geometry_type

        if geometry_type is GeometryType.GEOMETRY_COLLECTION:
            return {
                'type': geometry_type.value,
                'geometries': [self.encode(member) for member in geometry.geometries],
            }

        return {
            'type': geometry_type.value,
            'coordinates': geometry.get_coordinates(),
        }

    def encode_json(self, geometry: Geometry) -> str:
        return json.dumps(self.encode(geometry), separators=_JSON_SEPARATORS)

    def encode_feature_collection(self, geometry: Geometry) -> StructuredGeometry:
        """FeatureCollection with one Feature per collection member.

        A GeometryCollection contributes each of its members; any other
        geometry becomes a single Feature.
        """
        if geometry.geometry_type is GeometryType.GEOMETRY_COLLECTION:
            members = list(geometry.geometries)
        else:
            members = [geometry]

        return {
            'type': FEATURE_COLLECTION,
            'features': [
                {'type': FEATURE, 'properties': {}, 'geometry': self.encode(member)}
                for member in members
            ],
        }

    def encode_feature_collection_json(self, geometry: Geometry) -> str:
        return json.dumps(self.encode_feature_collection(geometry), separators=_JSON_SEPARATORS)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, data: StructuredGeometry, srid: Union[int, Srid, None] = None,
               expected: Optional[type] = None) -> Geometry:
        """Build a geometry from its structured mapping.

        Parameters
        ----------
        data : dict
            Geometry, Feature or FeatureCollection mapping.
        srid : int, optional
            SRID for the result (configured default if omitted).
        expected : type, optional
            Class the result must be an instance of.

        Raises
        ------
        ParseError
            If the mapping is malformed, names an unknown type, or nests
            collections deeper than ``MAX_NESTING_DEPTH``.
        InvalidGeometryStructure
            If ``coordinates`` is missing or empty, or a component count
            is invalid for its variant.
        TypeMismatch
            If the payload names a variant that is not ``expected``; this is
            checked before coordinates are validated.
        """
        resolved_srid = self.resolve_srid(srid)
        type_name = _type_name(data)

        if type_name == FEATURE_COLLECTION:
            self.check_expected_type(GeometryType.GEOMETRY_COLLECTION, expected)
            features = data.get('features')
            if not isinstance(features, list):
                raise ParseError("FeatureCollection must have a 'features' array")
            members = [self._decode_feature(feature, resolved_srid, depth=1) for feature in features]
            geometry = self.build_composite(GeometryType.GEOMETRY_COLLECTION, members, resolved_srid)
        elif type_name == FEATURE:
            geometry = self._decode_feature(data, resolved_srid, expected=expected)
        else:
            geometry = self._decode_geometry(data, resolved_srid, expected=expected)

        logger.debug(f"Decoded {geometry.type_name} from structured form")
        return self.check_expected(geometry, expected)

    def decode_json(self, text: Union[str, bytes], srid: Union[int, Srid, None] = None,
                    expected: Optional[type] = None) -> Geometry:
        """Parse JSON text and decode it with ``decode``."""
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid JSON: {e}") from e
        except RecursionError as e:
            raise ParseError("Invalid JSON: nested too deeply") from e
        return self.decode(data, srid, expected)

    def _decode_feature(self, feature: Any, srid: int, depth: int = 0,
                        expected: Optional[type] = None) -> Geometry:
        if _type_name(feature) != FEATURE:
            raise ParseError(f"Expected a Feature, got {feature.get('type')!r}")
        geometry = feature.get('geometry')
        if not isinstance(geometry, dict):
            raise ParseError("Feature must have a 'geometry' object")
        return self._decode_geometry(geometry, srid, depth, expected)

    def _decode_geometry(self, data: Any, srid: int, depth: int = 0,
                         expected: Optional[type] = None) -> Geometry:
        type_name = _type_name(data)
        try:
            geometry_type = GeometryType.from_name(type_name)
        except ValueError:
            raise ParseError(f"Unknown geometry type {type_name!r}") from None
        self.check_expected_type(geometry_type, expected)

        if geometry_type is GeometryType.GEOMETRY_COLLECTION:
            self.check_depth(depth + 1)
            members = data.get('geometries')
            if not isinstance(members, list):
                raise InvalidGeometryStructure("GeometryCollection must have a 'geometries' array")
            return self.build_composite(
                geometry_type, [self._decode_geometry(m, srid, depth + 1) for m in members], srid
            )

        coordinates = data.get('coordinates')
        if coordinates is None or (isinstance(coordinates, (list, tuple)) and len(coordinates) == 0):
            raise InvalidGeometryStructure(f"{type_name} must have non-empty 'coordinates'")

        return self._build(geometry_type, coordinates, srid)

    def _build(self, geometry_type: GeometryType, coordinates: Any, srid: int) -> Geometry:
        if geometry_type is GeometryType.POINT:
            return self._point(coordinates, srid)

        if geometry_type in (GeometryType.LINE_STRING, GeometryType.MULTI_POINT):
            points = [self._point(c, srid) for c in _array(coordinates, geometry_type)]
            return self.build_composite(geometry_type, points, srid)

        if geometry_type in (GeometryType.POLYGON, GeometryType.MULTI_LINE_STRING):
            lines = [self._build(GeometryType.LINE_STRING, c, srid)
                     for c in _array(coordinates, geometry_type)]
            return self.build_composite(geometry_type, lines, srid)

        if geometry_type is GeometryType.MULTI_POLYGON:
            polygons = [self._build(GeometryType.POLYGON, c, srid)
                        for c in _array(coordinates, geometry_type)]
            return self.build_composite(geometry_type, polygons, srid)

        raise ParseError(f"{geometry_type.value} has no coordinates form")

    def _point(self, position: Any, srid: int) -> Point:
        longitude, latitude = _position(position)
        return self.build_point(longitude, latitude, srid)


def _type_name(data: Any) -> str:
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
    type_name = data.get('type')
    if not isinstance(type_name, str):
        raise ParseError("Structured geometry must have a string 'type'")
    return type_name


def _array(value: Any, geometry_type: GeometryType) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        raise ParseError(f"{geometry_type.value} coordinates must be an array")
    return list(value)


def _position(value: Any) -> Tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ParseError(f"Position must be an array of two numbers, got {value!r}")
    for number in value:
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            raise ParseError(f"Position must be an array of two numbers, got {value!r}")
    return float(value[0]), float(value[1])
