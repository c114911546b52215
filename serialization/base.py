"""
Shared codec infrastructure.

Every codec turns an external payload into a Geometry and back. The base
class here holds the configuration (default SRID and the class registry)
and the construction and type-check steps all codecs share.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Union

from common.config import SpatialConfig, get_default_config, resolve_srid
from common.constants import MAX_NESTING_DEPTH, Srid
from common.exceptions import ParseError, TypeMismatch
from common.types import GeometryType
from geospatial.geometries import Geometry, Point


class GeometryCodec(ABC):
    """Abstract base class for geometry codecs.

    Parameters
    ----------
    config : SpatialConfig, optional
        Configuration supplying the default SRID and the classes to
        construct. The process-wide default is used when omitted.
    """

    def __init__(self, config: Optional[SpatialConfig] = None):
        self._config = config

    @property
    def config(self) -> SpatialConfig:
        """The configuration in effect (explicit, else process-wide)."""
        return self._config if self._config is not None else get_default_config()

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Human-readable name of the encoding."""
        pass

    @abstractmethod
    def encode(self, geometry: Geometry) -> Any:
        """Serialize a geometry."""
        pass

    @abstractmethod
    def decode(self, data: Any, srid: Union[int, Srid, None] = None,
               expected: Optional[type] = None) -> Geometry:
        """Parse a payload into a geometry.

        Parameters
        ----------
        data : Any
            Encoded payload.
        srid : int, optional
            SRID for the decoded geometry when the payload carries none.
        expected : type, optional
            Class the result must be an instance of.
        """
        pass

    def resolve_srid(self, srid: Union[int, Srid, None]) -> int:
        return resolve_srid(srid, self.config)

    def build_point(self, longitude: float, latitude: float, srid: int) -> Point:
        cls = self.config.geometry_class(GeometryType.POINT)
        return cls(longitude, latitude, srid)

    def build_composite(self, geometry_type: GeometryType,
                        components: Sequence[Geometry], srid: int) -> Geometry:
        cls = self.config.geometry_class(geometry_type)
        return cls(list(components), srid=srid)

    @staticmethod
    def check_expected(geometry: Geometry, expected: Optional[type]) -> Geometry:
        """Return ``geometry`` if it is an ``expected`` instance.

        Raises
        ------
        TypeMismatch
            If ``expected`` is given and ``geometry`` is not an instance.
        """
        if expected is not None and not isinstance(geometry, expected):
            raise TypeMismatch(expected.__name__, type(geometry).__name__)
        return geometry

    def check_expected_type(self, geometry_type: GeometryType, expected: Optional[type]) -> None:
        """Fail early when a payload's type tag cannot satisfy ``expected``.

        Raises
        ------
        TypeMismatch
            If the class configured for ``geometry_type`` is not a subclass
            of ``expected``.
        """
        if expected is None:
            return
        cls = self.config.geometry_class(geometry_type)
        if not issubclass(cls, expected):
            raise TypeMismatch(expected.__name__, cls.__name__)

    @staticmethod
    def check_depth(depth: int) -> None:
        """Reject collections nested deeper than ``MAX_NESTING_DEPTH``.

        Raises
        ------
        ParseError
            If ``depth`` exceeds the limit.
        """
        if depth > MAX_NESTING_DEPTH:
            raise ParseError(f"Geometry nesting deeper than {MAX_NESTING_DEPTH} levels")
