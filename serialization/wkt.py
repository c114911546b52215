"""
Well-Known Text codec.

Grammar
-------
::

    geometry   := KEYWORD ( "EMPTY" | body )
    point      := "(" position ")"
    linestring := "(" position ( "," position )* ")"
    polygon    := "(" linestring ( "," linestring )* ")"
    multipoint := "(" mp_item ( "," mp_item )* ")"
    mp_item    := position | "(" position ")"
    multiline  := polygon
    multipoly  := "(" polygon ( "," polygon )* ")"
    collection := "(" [ geometry ( "," geometry )* ] ")"
    position   := NUMBER NUMBER

Positions are ``longitude latitude`` (X Y). Keywords are case-insensitive.
The SRID is never part of the text: decoding takes it as an argument (or
from the configuration), so a WKT round trip alone does not preserve it.
"""

from collections import namedtuple
from typing import List, Optional, Tuple, Union
import re

from common.constants import Srid
from common.exceptions import InvalidGeometryStructure, ParseError
from common.logging_config import get_logger
from common.types import GeometryType
from geospatial.geometries import Geometry, Point
from serialization.base import GeometryCodec

logger = get_logger(__name__)

Token = namedtuple('Token', ['kind', 'value', 'position'])

_TOKEN_RE = re.compile(
    r"""
    (?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)
    | (?P<word>[A-Za-z_]+)
    | (?P<lparen>\()
    | (?P<rparen>\))
    | (?P<comma>,)
    """,
    re.VERBOSE,
)
_WHITESPACE_RE = re.compile(r"\s*")

END = 'end'


def format_number(value: float) -> str:
    """Shortest text that parses back to ``value``; integral values drop ``.0``."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def tokenize(text: str) -> List[Token]:
    """Split WKT into tokens.

    Raises
    ------
    ParseError
        On a character that starts no token.
    """
    tokens = []
    position = 0
    length = len(text)

    while True:
        position = _WHITESPACE_RE.match(text, position).end()
        if position >= length:
            break
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise ParseError(f"Unexpected character {text[position]!r} at offset {position}")
        tokens.append(Token(match.lastgroup, match.group(), position))
        position = match.end()

    tokens.append(Token(END, '', length))
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, tokens: List[Token], codec: 'WktCodec', srid: int,
                 expected: Optional[type] = None):
        self._tokens = tokens
        self._index = 0
        self._codec = codec
        self._srid = srid
        self._expected = expected

    # ----------------------------------------------------------------
    # Token helpers
    # ----------------------------------------------------------------

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != END:
            self._index += 1
        return token

    def _expect(self, kind: str, description: str) -> Token:
        token = self._advance()
        if token.kind != kind:
            found = 'end of input' if token.kind == END else repr(token.value)
            raise ParseError(f"Expected {description} at offset {token.position}, found {found}")
        return token

    def _accept(self, kind: str) -> bool:
        if self._peek().kind == kind:
            self._advance()
            return True
        return False

    # ----------------------------------------------------------------
    # Grammar
    # ----------------------------------------------------------------

    def parse(self) -> Geometry:
        geometry = self.parse_geometry()
        self._expect(END, 'end of input')
        return geometry

    def parse_geometry(self, depth: int = 0) -> Geometry:
        keyword = self._expect('word', 'geometry type keyword')
        try:
            geometry_type = GeometryType.from_wkt_keyword(keyword.value)
        except KeyError:
            raise ParseError(f"Unknown geometry type {keyword.value!r}") from None

        if depth == 0:
            self._codec.check_expected_type(geometry_type, self._expected)

        if self._peek().kind == 'word' and self._peek().value.upper() == 'EMPTY':
            self._advance()
            if geometry_type is not GeometryType.GEOMETRY_COLLECTION:
                raise InvalidGeometryStructure(f"Empty {geometry_type.value} is not supported")
            return self._codec.build_composite(geometry_type, [], self._srid)

        if geometry_type is GeometryType.POINT:
            self._expect('lparen', "'('")
            point = self._parse_point()
            self._expect('rparen', "')'")
            return point
        if geometry_type is GeometryType.LINE_STRING:
            return self._parse_line_string()
        if geometry_type is GeometryType.POLYGON:
            return self._parse_rings(GeometryType.POLYGON)
        if geometry_type is GeometryType.MULTI_POINT:
            return self._parse_multi_point()
        if geometry_type is GeometryType.MULTI_LINE_STRING:
            return self._parse_rings(GeometryType.MULTI_LINE_STRING)
        if geometry_type is GeometryType.MULTI_POLYGON:
            return self._parse_list(GeometryType.MULTI_POLYGON,
                                    lambda: self._parse_rings(GeometryType.POLYGON))
        if geometry_type is GeometryType.GEOMETRY_COLLECTION:
            return self._parse_collection(depth + 1)

        raise ParseError(f"Unsupported geometry type {geometry_type.value}")

    def _parse_position(self) -> Tuple[float, float]:
        x = self._expect('number', 'longitude')
        y = self._expect('number', 'latitude')
        if self._peek().kind == 'number':
            raise ParseError(
                f"Only two-dimensional coordinates are supported (offset {self._peek().position})"
            )
        return float(x.value), float(y.value)

    def _parse_point(self) -> Point:
        longitude, latitude = self._parse_position()
        return self._codec.build_point(longitude, latitude, self._srid)

    def _parse_list(self, geometry_type: GeometryType, parse_item) -> Geometry:
        self._expect('lparen', "'('")
        items = [parse_item()]
        while self._accept('comma'):
            items.append(parse_item())
        self._expect('rparen', "')' or ','")
        return self._codec.build_composite(geometry_type, items, self._srid)

    def _parse_line_string(self) -> Geometry:
        return self._parse_list(GeometryType.LINE_STRING, self._parse_point)

    def _parse_rings(self, geometry_type: GeometryType) -> Geometry:
        return self._parse_list(geometry_type, self._parse_line_string)

    def _parse_multi_point(self) -> Geometry:
        def parse_item() -> Point:
            if self._accept('lparen'):
                point = self._parse_point()
                self._expect('rparen', "')'")
                return point
            return self._parse_point()

        return self._parse_list(GeometryType.MULTI_POINT, parse_item)

    def _parse_collection(self, depth: int) -> Geometry:
        self._codec.check_depth(depth)
        self._expect('lparen', "'('")
        items = []
        if not self._accept('rparen'):
            items.append(self.parse_geometry(depth))
            while self._accept('comma'):
                items.append(self.parse_geometry(depth))
            self._expect('rparen', "')' or ','")
        return self._codec.build_composite(GeometryType.GEOMETRY_COLLECTION, items, self._srid)


class WktCodec(GeometryCodec):
    """Text <-> Geometry conversion in Well-Known Text.

    Examples
    --------
    >>> codec = WktCodec()
    >>> codec.encode(codec.decode("linestring (180 0,179 1)"))
    'LINESTRING(180 0, 179 1)'
    """

    @property
    def format_name(self) -> str:
        return "WKT"

    def encode(self, geometry: Geometry) -> str:
        """Render ``geometry`` as WKT."""
        geometry_type = geometry.geometry_type
        keyword = geometry_type.wkt_keyword

        if geometry_type is GeometryType.GEOMETRY_COLLECTION:
            if len(geometry.geometries) == 0:
                return f"{keyword} EMPTY"
            members = ", ".join(self.encode(member) for member in geometry.geometries)
            return f"{keyword}({members})"

        return f"{keyword}{self._body(geometry)}"

    def _body(self, geometry: Geometry) -> str:
        geometry_type = geometry.geometry_type

        if geometry_type is GeometryType.POINT:
            return f"({_position(geometry)})"
        if geometry_type in (GeometryType.LINE_STRING, GeometryType.MULTI_POINT):
            return "(" + ", ".join(_position(point) for point in geometry.geometries) + ")"
        if geometry_type in (GeometryType.POLYGON, GeometryType.MULTI_LINE_STRING,
                             GeometryType.MULTI_POLYGON):
            return "(" + ", ".join(self._body(part) for part in geometry.geometries) + ")"

        raise ParseError(f"Cannot encode {geometry_type.value} as a WKT body")

    def decode(self, data: Union[str, bytes], srid: Union[int, Srid, None] = None,
               expected: Optional[type] = None) -> Geometry:
        """Parse WKT text.

        Parameters
        ----------
        data : str or bytes
            WKT text, e.g. ``"POINT(180 0)"``.
        srid : int, optional
            SRID given to every decoded geometry (configured default if omitted).
        expected : type, optional
            Class the result must be an instance of.

        Raises
        ------
        ParseError
            If the text is malformed, truncated, has trailing content, or
            nests collections deeper than ``MAX_NESTING_DEPTH``.
        InvalidGeometryStructure
            If a component count is invalid for its variant.
        InvalidCoordinate
            If a position is out of range.
        TypeMismatch
            If the result is not an ``expected`` instance.
        """
        if isinstance(data, (bytes, bytearray)):
            try:
                data = bytes(data).decode('ascii')
            except UnicodeDecodeError as e:
                raise ParseError(f"WKT must be ASCII text: {e}") from e
        if not isinstance(data, str):
            raise ParseError(f"WKT must be a string, {type(data).__name__} given.")

        geometry = _Parser(tokenize(data), self, self.resolve_srid(srid), expected).parse()
        logger.debug(f"Decoded {geometry.type_name} from WKT")
        return self.check_expected(geometry, expected)


def _position(point: Point) -> str:
    return f"{format_number(point.longitude)} {format_number(point.latitude)}"
