"""
Well-Known Binary codec.

Layout
------
Each geometry starts with a header:

1. 1 byte: byte order (0 = big-endian, 1 = little-endian).
2. 4 bytes: geometry type code (1-7), optionally OR-ed with the EWKB
   SRID flag ``0x20000000``.
3. 4 bytes: SRID, present only when the SRID flag is set.

followed by the type-specific payload, in the header's byte order:

- Point: two doubles, X (longitude) then Y (latitude).
- LineString: uint32 point count, then that many raw X/Y double pairs.
- Polygon: uint32 ring count, then per ring a uint32 point count and raw
  X/Y double pairs.
- Multi* and GeometryCollection: uint32 member count, then each member as a
  complete WKB geometry with its own header.

Only two-dimensional geometries are handled; Z/M type codes are rejected.
Coordinate blocks are moved through numpy as contiguous IEEE-754 arrays.
"""

from enum import IntEnum
from typing import List, Optional, Tuple, Union
import binascii
import struct

import numpy as np
from numpy.typing import NDArray

from common.constants import (
    Srid,
    WKB_BIG_ENDIAN,
    WKB_DOUBLE_SIZE,
    WKB_ISO_DIMENSION_STEP,
    WKB_LITTLE_ENDIAN,
    WKB_M_FLAG,
    WKB_SRID_FLAG,
    WKB_UINT32_SIZE,
    WKB_Z_FLAG,
)
from common.exceptions import InvalidArgument, ParseError
from common.logging_config import get_logger
from common.types import GeometryType
from geospatial.geometries import Geometry, Point
from serialization.base import GeometryCodec

logger = get_logger(__name__)

WkbInput = Union[bytes, bytearray, memoryview, str]

_MAX_SRID = 0xFFFFFFFF


class ByteOrder(IntEnum):
    """WKB byte order marker."""

    BIG_ENDIAN = WKB_BIG_ENDIAN
    LITTLE_ENDIAN = WKB_LITTLE_ENDIAN

    @property
    def struct_prefix(self) -> str:
        return '<' if self is ByteOrder.LITTLE_ENDIAN else '>'

    @property
    def double_dtype(self) -> np.dtype:
        return np.dtype(self.struct_prefix + 'f8')


class _WkbReader:
    """Bounds-checked cursor over a WKB buffer."""

    def __init__(self, data: bytes):
        self._data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def _require(self, size: int, what: str) -> None:
        if size > self.remaining:
            raise ParseError(
                f"WKB truncated reading {what} at offset {self.offset}: "
                f"need {size} bytes, {self.remaining} left"
            )

    def read_byte_order(self) -> ByteOrder:
        self._require(1, 'byte order')
        value = self._data[self.offset]
        self.offset += 1
        try:
            return ByteOrder(value)
        except ValueError:
            raise ParseError(f"Invalid WKB byte order {value} at offset {self.offset - 1}") from None

    def read_uint32(self, order: ByteOrder, what: str) -> int:
        self._require(WKB_UINT32_SIZE, what)
        (value,) = struct.unpack_from(order.struct_prefix + 'I', self._data, self.offset)
        self.offset += WKB_UINT32_SIZE
        return value

    def read_count(self, order: ByteOrder, item_size: int, what: str) -> int:
        count = self.read_uint32(order, what)
        # Every item needs at least item_size bytes, so a larger count is truncated data
        self._require(count * item_size, what)
        return count

    def read_doubles(self, order: ByteOrder, count: int, what: str) -> NDArray[np.float64]:
        size = count * WKB_DOUBLE_SIZE
        self._require(size, what)
        values = np.frombuffer(self._data, dtype=order.double_dtype, count=count, offset=self.offset)
        self.offset += size
        return values.astype(np.float64)


class WkbCodec(GeometryCodec):
    """Binary <-> Geometry conversion in (E)WKB.

    Examples
    --------
    >>> codec = WkbCodec()
    >>> codec.encode(Point(180, 0, 0)).hex()
    '010100000000000000008066400000000000000000'
    """

    @property
    def format_name(self) -> str:
        return "WKB"

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, geometry: Geometry, byte_order: int = ByteOrder.LITTLE_ENDIAN,
               include_srid: Optional[bool] = None) -> bytes:
        """Serialize ``geometry`` to WKB.

        Parameters
        ----------
        geometry : Geometry
            Geometry to encode.
        byte_order : int
            ``ByteOrder.LITTLE_ENDIAN`` (default) or ``ByteOrder.BIG_ENDIAN``.
        include_srid : bool, optional
            Write the EWKB SRID header on the outermost geometry. Defaults
            to True exactly when the geometry's SRID is non-zero.

        Raises
        ------
        InvalidArgument
            On an unknown byte order or an SRID that does not fit 32 bits.
        """
        try:
            order = ByteOrder(byte_order)
        except ValueError:
            raise InvalidArgument(f"Invalid WKB byte order {byte_order!r}") from None

        if include_srid is None:
            include_srid = geometry.srid != 0
        if include_srid and not 0 <= geometry.srid <= _MAX_SRID:
            raise InvalidArgument(f"SRID {geometry.srid} does not fit in an unsigned 32-bit field")

        chunks: List[bytes] = []
        self._write(geometry, order, include_srid, chunks)
        return b''.join(chunks)

    def encode_hex(self, geometry: Geometry, byte_order: int = ByteOrder.LITTLE_ENDIAN,
                   include_srid: Optional[bool] = None) -> str:
        """``encode`` rendered as upper-case hexadecimal text."""
        return self.encode(geometry, byte_order, include_srid).hex().upper()

    def _write(self, geometry: Geometry, order: ByteOrder, include_srid: bool,
               chunks: List[bytes]) -> None:
        geometry_type = geometry.geometry_type
        prefix = order.struct_prefix

        if include_srid:
            chunks.append(struct.pack(prefix + 'BII', order, geometry_type.wkb_code | WKB_SRID_FLAG,
                                      geometry.srid))
        else:
            chunks.append(struct.pack(prefix + 'BI', order, geometry_type.wkb_code))

        if geometry_type is GeometryType.POINT:
            chunks.append(_coordinate_block([geometry], order))
        elif geometry_type is GeometryType.LINE_STRING:
            self._write_point_list(geometry.geometries, order, chunks)
        elif geometry_type is GeometryType.POLYGON:
            chunks.append(struct.pack(prefix + 'I', len(geometry.geometries)))
            for ring in geometry.geometries:
                self._write_point_list(ring.geometries, order, chunks)
        elif geometry_type in (GeometryType.MULTI_POINT, GeometryType.MULTI_LINE_STRING,
                               GeometryType.MULTI_POLYGON, GeometryType.GEOMETRY_COLLECTION):
            chunks.append(struct.pack(prefix + 'I', len(geometry.geometries)))
            for member in geometry.geometries:
                self._write(member, order, False, chunks)
        else:
            raise InvalidArgument(f"Cannot encode {type(geometry).__name__} as WKB")

    @staticmethod
    def _write_point_list(points, order: ByteOrder, chunks: List[bytes]) -> None:
        chunks.append(struct.pack(order.struct_prefix + 'I', len(points)))
        chunks.append(_coordinate_block(points, order))

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, data: WkbInput, srid: Union[int, Srid, None] = None,
               expected: Optional[type] = None) -> Geometry:
        """Parse WKB (raw bytes, or hexadecimal text).

        Parameters
        ----------
        data : bytes, bytearray, memoryview or str
            WKB payload. A ``str`` is treated as hexadecimal.
        srid : int, optional
            SRID used when the payload has no SRID header (configured
            default if omitted).
        expected : type, optional
            Class the result must be an instance of.

        Raises
        ------
        ParseError
            On truncation, an invalid byte order, an unknown or
            non-two-dimensional type code, invalid hex, trailing bytes, or
            collections nested deeper than ``MAX_NESTING_DEPTH``.
        TypeMismatch
            If the result is not an ``expected`` instance.
        """
        if isinstance(data, str):
            return self.decode_hex(data, srid, expected)
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ParseError(f"WKB must be bytes, {type(data).__name__} given.")

        reader = _WkbReader(bytes(data))
        if reader.remaining == 0:
            raise ParseError("WKB is empty")

        geometry = self._read_geometry(reader, srid, expected=expected)

        if reader.remaining:
            raise ParseError(f"{reader.remaining} unexpected trailing bytes after WKB geometry")

        logger.debug(f"Decoded {geometry.type_name} from WKB")
        return self.check_expected(geometry, expected)

    def decode_hex(self, text: str, srid: Union[int, Srid, None] = None,
                   expected: Optional[type] = None) -> Geometry:
        """Parse hexadecimal WKB text."""
        if not isinstance(text, str):
            raise ParseError(f"Hexadecimal WKB must be a string, {type(text).__name__} given.")
        try:
            data = binascii.unhexlify(text.strip())
        except (binascii.Error, ValueError) as e:
            raise ParseError(f"Invalid hexadecimal WKB: {e}") from e
        return self.decode(data, srid, expected)

    def _read_header(self, reader: _WkbReader) -> Tuple[ByteOrder, GeometryType, Optional[int]]:
        order = reader.read_byte_order()
        code = reader.read_uint32(order, 'geometry type')

        if code & (WKB_Z_FLAG | WKB_M_FLAG):
            raise ParseError(f"Only two-dimensional WKB is supported (type code {code:#010x})")

        has_srid = bool(code & WKB_SRID_FLAG)
        base_code = code & ~WKB_SRID_FLAG

        if base_code >= WKB_ISO_DIMENSION_STEP:
            raise ParseError(f"Only two-dimensional WKB is supported (type code {base_code})")
        try:
            geometry_type = GeometryType.from_wkb_code(base_code)
        except KeyError:
            raise ParseError(f"Unknown WKB geometry type code {base_code}") from None

        header_srid = reader.read_uint32(order, 'SRID') if has_srid else None
        return order, geometry_type, header_srid

    def _read_geometry(self, reader: _WkbReader, srid, depth: int = 0,
                       expected: Optional[type] = None) -> Geometry:
        order, geometry_type, header_srid = self._read_header(reader)

        # Members inherit the outer SRID; only the outermost header sets it
        if depth == 0:
            self.check_expected_type(geometry_type, expected)
            srid = header_srid if header_srid is not None else self.resolve_srid(srid)

        if geometry_type is GeometryType.POINT:
            return self._read_point(reader, order, srid)
        if geometry_type is GeometryType.LINE_STRING:
            return self._read_line_string(reader, order, srid)
        if geometry_type is GeometryType.POLYGON:
            count = reader.read_count(order, WKB_UINT32_SIZE, 'ring count')
            rings = [self._read_line_string(reader, order, srid) for _ in range(count)]
            return self.build_composite(GeometryType.POLYGON, rings, srid)

        # Multi* and GeometryCollection: full nested geometries
        self.check_depth(depth + 1)
        count = reader.read_count(order, 1 + WKB_UINT32_SIZE, 'member count')
        members = [self._read_geometry(reader, srid, depth + 1) for _ in range(count)]
        return self.build_composite(geometry_type, members, srid)

    def _read_point(self, reader: _WkbReader, order: ByteOrder, srid: int) -> Point:
        x, y = reader.read_doubles(order, 2, 'point')
        return self.build_point(float(x), float(y), srid)

    def _read_line_string(self, reader: _WkbReader, order: ByteOrder, srid: int) -> Geometry:
        count = reader.read_count(order, 2 * WKB_DOUBLE_SIZE, 'point count')
        values = reader.read_doubles(order, 2 * count, 'point list').reshape(count, 2)
        points = [self.build_point(float(x), float(y), srid) for x, y in values]
        return self.build_composite(GeometryType.LINE_STRING, points, srid)


def _coordinate_block(points, order: ByteOrder) -> bytes:
    coordinates = np.array([[p.longitude, p.latitude] for p in points], dtype=np.float64)
    return coordinates.astype(order.double_dtype).tobytes()
