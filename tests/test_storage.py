"""Tests for the storage format adapter."""

import json

import pytest

from common.config import SpatialConfig
from common.exceptions import InvalidArgument, ParseError, TypeMismatch
from geospatial import BoundingBox, Geometry, LineString, MultiPolygon, Point, Polygon
from serialization.storage import BoundingBoxSerializer, GeometrySerializer, StorageFormat
from serialization.wkb import WkbCodec


class TestStorageFormat:
    def test_parse(self):
        assert StorageFormat.parse("json") is StorageFormat.JSON
        assert StorageFormat.parse(StorageFormat.GEOMETRY) is StorageFormat.GEOMETRY

    def test_unknown_format(self):
        with pytest.raises(InvalidArgument, match='Invalid format "xml". Supported formats: geometry, json'):
            StorageFormat.parse("xml")


class TestGeometrySerializer:
    def test_none_passes_through(self):
        serializer = GeometrySerializer()
        assert serializer.serialize(None) is None
        assert serializer.deserialize(None) is None

    def test_geometry_format_writes_ewkb(self):
        serializer = GeometrySerializer(Point)
        stored = serializer.serialize(Point(180, 0, 4326))

        assert isinstance(stored, bytes)
        assert serializer.deserialize(stored) == Point(180, 0, 4326)

    def test_geometry_format_keeps_zero_srid(self):
        stored = GeometrySerializer().serialize(Point(1, 2))
        assert len(stored) == 1 + 4 + 4 + 16

    def test_json_format(self):
        serializer = GeometrySerializer(LineString, format="json", config=SpatialConfig(default_srid=4326))
        line = LineString([Point(0, 0, 4326), Point(1, 1, 4326)], srid=4326)

        stored = serializer.serialize(line)

        assert json.loads(stored) == {'type': 'LineString', 'coordinates': [[0, 0], [1, 1]]}
        assert serializer.deserialize(stored) == line

    def test_wrong_variant_on_write(self):
        with pytest.raises(TypeMismatch, match="Expected Polygon, Point given."):
            GeometrySerializer(Polygon).serialize(Point(0, 0))

    def test_wrong_variant_on_read(self):
        stored = GeometrySerializer().serialize(Point(0, 0))
        with pytest.raises(TypeMismatch):
            GeometrySerializer(Polygon).deserialize(stored)

    def test_malformed_stored_value(self):
        with pytest.raises(ParseError):
            GeometrySerializer(format=StorageFormat.JSON).deserialize("{")

    def test_geometry_class_must_be_geometry(self):
        with pytest.raises(InvalidArgument):
            GeometrySerializer(dict)


class TestBoundingBoxSerializer:
    @pytest.fixture
    def crossing_box(self):
        return BoundingBox(Point(170, 50, 4326), Point(-170, 60, 4326))

    def test_none_passes_through(self):
        serializer = BoundingBoxSerializer()
        assert serializer.serialize(None) is None
        assert serializer.deserialize(None) is None

    def test_geometry_format_stores_multipolygon_for_crossing_box(self, crossing_box):
        serializer = BoundingBoxSerializer()
        stored = serializer.serialize(crossing_box)

        assert isinstance(WkbCodec().decode(stored), MultiPolygon)
        assert serializer.deserialize(stored) == crossing_box

    def test_geometry_format_plain_box(self):
        box = BoundingBox(Point(-10, -5), Point(10, 5))
        serializer = BoundingBoxSerializer("geometry")
        assert serializer.deserialize(serializer.serialize(box)) == box

    def test_json_format(self, crossing_box):
        serializer = BoundingBoxSerializer(StorageFormat.JSON)
        stored = serializer.serialize(crossing_box)

        assert stored == '{"left":170.0,"bottom":50.0,"right":-170.0,"top":60.0}'
        assert serializer.deserialize(stored).to_array() == crossing_box.to_array()

    def test_array_input(self):
        stored = BoundingBoxSerializer("json").serialize({'left': 1, 'bottom': 2, 'right': 3, 'top': 4})
        assert json.loads(stored) == {'left': 1, 'bottom': 2, 'right': 3, 'top': 4}

    def test_incomplete_array_input(self):
        with pytest.raises(InvalidArgument):
            BoundingBoxSerializer().serialize({'left': 1})

    def test_wrong_type_on_write(self):
        with pytest.raises(TypeMismatch):
            BoundingBoxSerializer().serialize(Point(0, 0))

    def test_stored_geometry_must_be_polygonal(self):
        stored = Point(0, 0).to_wkb()
        with pytest.raises(TypeMismatch, match="Polygon or MultiPolygon"):
            BoundingBoxSerializer().deserialize(stored)

    def test_any_geometry_class_is_accepted(self):
        assert GeometrySerializer(Geometry).geometry_class is Geometry
