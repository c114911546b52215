"""Tests for the Well-Known Text codec."""

import pytest

from common.config import SpatialConfig
from common.exceptions import InvalidCoordinate, InvalidGeometryStructure, ParseError, TypeMismatch
from geospatial import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from serialization.wkt import WktCodec, format_number, tokenize


@pytest.fixture
def codec():
    return WktCodec()


class TestEncode:
    def test_reference_forms(self, codec, sample_geometries):
        assert codec.encode(sample_geometries['Point']) == "POINT(180 0)"
        assert codec.encode(sample_geometries['LineString']) == "LINESTRING(180 0, 179 1)"
        assert codec.encode(sample_geometries['Polygon']) == (
            "POLYGON((180 0, 179 1, 178 2, 177 3, 180 0))"
        )
        assert codec.encode(sample_geometries['MultiPolygon']) == (
            "MULTIPOLYGON(((180 0, 179 1, 178 2, 177 3, 180 0)))"
        )

    def test_multi_point_and_multi_line_string(self, codec, sample_geometries):
        assert codec.encode(sample_geometries['MultiPoint']) == "MULTIPOINT(180 0, 179 1)"
        assert codec.encode(sample_geometries['MultiLineString']) == (
            "MULTILINESTRING((180 0, 179 1))"
        )

    def test_geometry_collection(self, codec):
        collection = GeometryCollection([Point(1, 2), LineString([Point(0, 0), Point(1, 1)])])
        assert codec.encode(collection) == "GEOMETRYCOLLECTION(POINT(1 2), LINESTRING(0 0, 1 1))"
        assert codec.encode(GeometryCollection([])) == "GEOMETRYCOLLECTION EMPTY"

    @pytest.mark.parametrize("value, text", [
        (180.0, "180"),
        (-0.5, "-0.5"),
        (12.345678901234, "12.345678901234"),
        (0.1, "0.1"),
    ])
    def test_format_number(self, value, text):
        assert format_number(value) == text


class TestDecode:
    def test_point(self, codec):
        assert codec.decode("POINT(180 0)") == Point(180, 0)

    def test_keywords_are_case_insensitive_and_whitespace_is_free(self, codec):
        geometry = codec.decode("  linestring ( 180   0 ,179 1 )\n")
        assert geometry == LineString([Point(180, 0), Point(179, 1)])

    def test_multi_point_accepts_both_forms(self, codec):
        expected = MultiPoint([Point(1, 2), Point(3, 4)])
        assert codec.decode("MULTIPOINT(1 2, 3 4)") == expected
        assert codec.decode("MULTIPOINT((1 2), (3 4))") == expected

    def test_empty_collection(self, codec):
        assert codec.decode("GEOMETRYCOLLECTION EMPTY") == GeometryCollection([])
        assert codec.decode("GEOMETRYCOLLECTION()") == GeometryCollection([])

    def test_empty_non_collection_is_invalid(self, codec):
        with pytest.raises(InvalidGeometryStructure):
            codec.decode("POINT EMPTY")

    def test_scientific_notation(self, codec):
        assert codec.decode("POINT(1.5e1 -2E-1)") == Point(15, -0.2)

    def test_srid_comes_from_argument_or_configuration(self):
        assert WktCodec().decode("POINT(1 2)", srid=4326).srid == 4326
        assert WktCodec(SpatialConfig(default_srid=3857)).decode("POINT(1 2)").srid == 3857

    def test_components_share_the_srid(self, codec):
        polygon = codec.decode("POLYGON((0 0, 1 0, 1 1, 0 0))", srid=4326)
        assert {p.srid for p in polygon.get_points()} == {4326}

    def test_bytes_input(self, codec):
        assert codec.decode(b"POINT(1 2)") == Point(1, 2)

    @pytest.mark.parametrize("text", [
        "",
        "POINT",
        "POINT(1)",
        "POINT(1 2",
        "POINT(1 2 3)",
        "POINT(1 2) extra",
        "CIRCLE(1 2)",
        "POINT(1 2);",
        "LINESTRING(1 2, )",
    ])
    def test_malformed_text_fails(self, codec, text):
        with pytest.raises(ParseError):
            codec.decode(text)

    def test_component_rules_are_enforced(self, codec):
        with pytest.raises(InvalidGeometryStructure):
            codec.decode("LINESTRING(1 2)")

    def test_out_of_range_coordinate(self, codec):
        with pytest.raises(InvalidCoordinate):
            codec.decode("POINT(181 0)")

    def test_expected_variant(self, codec):
        with pytest.raises(TypeMismatch):
            codec.decode("POINT(1 2)", expected=Polygon)


class TestRoundTrip:
    @pytest.mark.parametrize("name", [
        'Point', 'LineString', 'Polygon', 'MultiPoint',
        'MultiLineString', 'MultiPolygon', 'GeometryCollection',
    ])
    def test_every_variant(self, codec, sample_geometries, name):
        geometry = sample_geometries[name]
        assert codec.decode(codec.encode(geometry)) == geometry

    def test_high_precision_coordinates(self, codec):
        point = Point(-73.98565574123, 40.74844174567)
        assert codec.decode(codec.encode(point)) == point

    def test_nested_collection(self, codec):
        inner = GeometryCollection([Point(1, 2), GeometryCollection([])])
        outer = GeometryCollection([inner, MultiLineString([LineString([Point(0, 0), Point(5, 5)])])])
        assert codec.decode(codec.encode(outer)) == outer

    def test_composite_srid_with_bare_members(self, codec):
        line = LineString([Point(1, 2), Point(3, 4)], srid=4326)
        assert codec.decode(codec.encode(line), srid=4326) == line


class TestNestingLimit:
    @staticmethod
    def _nested(levels):
        return "GEOMETRYCOLLECTION(" * levels + "POINT(1 2)" + ")" * levels

    def test_deep_collection_nesting_fails(self, codec):
        with pytest.raises(ParseError, match="nesting"):
            codec.decode(self._nested(2000))

    def test_nesting_up_to_limit_decodes(self, codec):
        collection = codec.decode(self._nested(64))
        for _ in range(64):
            collection = collection[0]
        assert collection == Point(1, 2)

        with pytest.raises(ParseError, match="nesting"):
            codec.decode(self._nested(65))

    def test_unexpected_keyword_fails_before_coordinates(self, codec):
        with pytest.raises(TypeMismatch, match="Expected Polygon, Point given."):
            codec.decode("POINT(200 0)", expected=Polygon)


class TestTokenize:
    def test_token_kinds(self):
        kinds = [token.kind for token in tokenize("POINT(1 -2.5)")]
        assert kinds == ['word', 'lparen', 'number', 'number', 'rparen', 'end']

    def test_unexpected_character(self):
        with pytest.raises(ParseError, match="offset 5"):
            tokenize("POINT;")
