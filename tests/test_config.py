"""Tests for configuration, registry substitution and logging setup."""

import logging

import pytest

from common.config import SpatialConfig, get_default_config, resolve_srid, set_default_config
from common.constants import DEFAULT_SRID, GeodeticLimits, Srid
from common.exceptions import InvalidArgument, SpatialError, TypeMismatch
from common.logging_config import get_logger, set_log_level
from common.types import GeometryType
from geospatial import GeometryCollection, LineString, Point, Polygon
from serialization.geojson import GeoJsonCodec
from serialization.wkb import WkbCodec
from serialization.wkt import WktCodec


class LabelledPoint(Point):
    """Caller-supplied Point substitute."""

    @property
    def label(self):
        return f"{self.longitude:.1f}/{self.latitude:.1f}"


class TaggedLineString(LineString):
    pass


class TestSrid:
    def test_default_is_zero(self):
        assert DEFAULT_SRID == 0
        assert get_default_config().default_srid == 0

    def test_resolve(self):
        assert resolve_srid(None) == 0
        assert resolve_srid(Srid.WGS84) == 4326
        assert resolve_srid(None, SpatialConfig(default_srid=3857)) == 3857

    @pytest.mark.parametrize("value", ["4326", 4326.0, False])
    def test_resolve_rejects_non_integers(self, value):
        with pytest.raises(InvalidArgument):
            resolve_srid(value)

    def test_with_srid_copies(self):
        config = SpatialConfig()
        other = config.with_srid(Srid.WGS84)

        assert other.default_srid == 4326
        assert config.default_srid == 0

    def test_set_default_config_returns_previous(self):
        replacement = SpatialConfig(default_srid=4326)
        previous = set_default_config(replacement)

        assert get_default_config() is replacement
        assert isinstance(previous, SpatialConfig)

    def test_set_default_config_rejects_other_values(self):
        with pytest.raises(InvalidArgument):
            set_default_config({'default_srid': 4326})


class TestRegistry:
    def test_builtin_classes_by_default(self):
        config = SpatialConfig()
        assert config.geometry_class(GeometryType.POINT) is Point
        assert config.geometry_class(GeometryType.GEOMETRY_COLLECTION) is GeometryCollection

    def test_codecs_construct_registered_classes(self):
        config = SpatialConfig()
        config.register(GeometryType.POINT, LabelledPoint)
        config.register("LineString", TaggedLineString)

        line = WktCodec(config).decode("LINESTRING(1 2, 3 4)")

        assert isinstance(line, TaggedLineString)
        assert all(isinstance(point, LabelledPoint) for point in line)
        assert line[0].label == "1.0/2.0"

    def test_substitute_is_encoded_as_its_variant(self):
        config = SpatialConfig()
        config.register(GeometryType.POINT, LabelledPoint)
        point = GeoJsonCodec(config).decode({'type': 'Point', 'coordinates': [1, 2]})

        assert point.to_wkt() == "POINT(1 2)"
        assert WkbCodec(config).decode(point.to_wkb()).label == "1.0/2.0"

    def test_substitute_satisfies_base_expectation(self):
        config = SpatialConfig()
        config.register(GeometryType.POINT, LabelledPoint)
        assert isinstance(Point.from_wkt("POINT(1 2)", config=config), LabelledPoint)

    def test_registration_needs_matching_subclass(self):
        config = SpatialConfig()
        with pytest.raises(InvalidArgument):
            config.register(GeometryType.POLYGON, LabelledPoint)
        with pytest.raises(InvalidArgument):
            config.register("Circle", LabelledPoint)

    def test_registries_are_isolated(self):
        config = SpatialConfig()
        config.register(GeometryType.POINT, LabelledPoint)

        assert type(WktCodec().decode("POINT(1 2)")) is Point

    def test_process_wide_default_registry(self):
        get_default_config().register(GeometryType.POLYGON, type('MyPolygon', (Polygon,), {}))
        polygon = WktCodec().decode("POLYGON((0 0, 1 0, 1 1, 0 0))")
        assert type(polygon).__name__ == 'MyPolygon'


class TestConstantsAndErrors:
    def test_limits(self):
        assert GeodeticLimits.LONGITUDE_MAX.value == 180.0
        assert GeodeticLimits.LATITUDE_MIN.value == -90.0
        assert 'FULL_CIRCLE' in GeodeticLimits.get_all_limits()

    def test_every_error_is_a_value_error(self):
        error = TypeMismatch("Polygon", "Point")
        assert isinstance(error, SpatialError)
        assert isinstance(error, ValueError)
        assert (error.expected, error.actual) == ("Polygon", "Point")


class TestLogging:
    def test_handler_attached_once(self):
        first = get_logger("spatial.test")
        second = get_logger("spatial.test")

        assert first is second
        assert len(first.handlers) == 1

    def test_set_log_level(self):
        logger = get_logger("spatial.level")
        set_log_level(logging.DEBUG)
        try:
            assert logger.level == logging.DEBUG
        finally:
            set_log_level(logging.WARNING)
