"""
Configuration for geometry construction and codecs.

A ``SpatialConfig`` carries the default SRID and the variant registry (the
concrete class each codec instantiates for a geometry tag). Codecs and the
storage adapter take a config explicitly; when none is given they use
the process-wide default held here.

Thread Safety
-------------
The process-wide default is plain shared state. Establish it before
concurrent parsing starts; mutating it while other threads decode or
construct geometries is not synchronized by this module.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Type, Union

from common.constants import DEFAULT_SRID, Srid
from common.exceptions import InvalidArgument
from common.logging_config import get_logger
from common.types import GeometryType

logger = get_logger(__name__)


def resolve_srid(srid: Union[int, Srid, None], config: Optional['SpatialConfig'] = None) -> int:
    """Return ``srid`` as a plain int, falling back to the configured default.

    Parameters
    ----------
    srid : int, Srid or None
        Explicit SRID. ``None`` selects the configured default.
    config : SpatialConfig, optional
        Configuration to read the default from (process-wide if omitted).

    Returns
    -------
    int
        The resolved SRID.
    """
    if srid is None:
        return (config or get_default_config()).default_srid
    if isinstance(srid, bool) or not isinstance(srid, int):
        raise InvalidArgument(f"SRID must be an integer, got {srid!r}")
    return int(srid)


@dataclass
class SpatialConfig:
    """Configuration threaded through codecs and the storage adapter.

    Attributes
    ----------
    default_srid : int
        SRID given to geometries whose SRID is not supplied.
    geometry_classes : dict
        Overrides of the concrete class constructed for a geometry tag.
        Tags without an override use the built-in class.
    """
    default_srid: int = DEFAULT_SRID
    geometry_classes: Dict[GeometryType, type] = field(default_factory=dict)

    def __post_init__(self):
        if self.default_srid is None:
            self.default_srid = DEFAULT_SRID
        self.default_srid = resolve_srid(self.default_srid, self)

    def geometry_class(self, geometry_type: GeometryType) -> type:
        """Class the codecs instantiate for ``geometry_type``."""
        override = self.geometry_classes.get(geometry_type)
        if override is not None:
            return override
        return _builtin_geometry_class(geometry_type)

    def register(self, geometry_type: Union[GeometryType, str], cls: Type) -> None:
        """Substitute the class constructed for a geometry tag.

        Parameters
        ----------
        geometry_type : GeometryType or str
            Variant tag or its structured-form name (e.g. ``"Point"``).
        cls : type
            Subclass of the built-in class for that tag.

        Raises
        ------
        InvalidArgument
            If the tag is unknown or ``cls`` is not a subclass of the
            built-in class for it.
        """
        try:
            tag = GeometryType(geometry_type)
        except ValueError as e:
            raise InvalidArgument(f"Unknown geometry type {geometry_type!r}") from e

        base = _builtin_geometry_class(tag)
        if not (isinstance(cls, type) and issubclass(cls, base)):
            raise InvalidArgument(
                f"{getattr(cls, '__name__', cls)!r} must be a subclass of {base.__name__}"
            )

        self.geometry_classes[tag] = cls
        logger.info(f"Registered {cls.__name__} for {tag.value}")

    def with_srid(self, srid: Union[int, Srid]) -> 'SpatialConfig':
        """Copy of this config with a different default SRID."""
        return replace(self, default_srid=resolve_srid(srid),
                       geometry_classes=dict(self.geometry_classes))


def _builtin_geometry_class(geometry_type: GeometryType) -> type:
    # geospatial.geometries imports this module for SRID resolution
    from geospatial import geometries

    return geometries.BUILTIN_CLASSES[geometry_type]


_default_config = SpatialConfig()


def get_default_config() -> SpatialConfig:
    """Return the process-wide default configuration."""
    return _default_config


def set_default_config(config: SpatialConfig) -> SpatialConfig:
    """Replace the process-wide default configuration.

    Returns
    -------
    SpatialConfig
        The configuration that was previously installed.
    """
    global _default_config

    if not isinstance(config, SpatialConfig):
        raise InvalidArgument(f"Expected SpatialConfig, {type(config).__name__} given.")

    previous = _default_config
    _default_config = config
    logger.info(f"Default spatial config installed (default_srid={config.default_srid})")
    return previous
