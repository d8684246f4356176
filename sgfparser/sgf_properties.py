"""Interpret SGF property values.

This is intended for use with SGF FF[4]; see http://www.red-bean.com/sgf/

This supports all general properties and Go-specific properties, but not
properties for other games. Point, Move and Stone values are interpreted as Go
points.

Every property occurrence becomes exactly one Token. Properties missing from
the table become UNKNOWN tokens, and values the table's interpreter rejects
become INVALID tokens; neither is an error.

"""

import codecs
import enum
import logging
import re
from dataclasses import dataclass
from math import isinf, isnan
from typing import NamedTuple, Optional, Tuple

from . import sgf_grammar
from .common import opponent_of

logger = logging.getLogger(__name__)


def normalise_charset_name(s):
    """Convert an encoding name to the form implied in the SGF spec.

    In particular, normalises to 'ISO-8859-1' and 'UTF-8'.

    Raises LookupError if the encoding name isn't known to Python.

    """
    return (codecs.lookup(s).name.replace("_", "-").upper()
            .replace("ISO8859", "ISO-8859"))


def normalise_identifier(identifier):
    """Drop lower-case letters from a PropIdent.

    FF[3] allowed lower-case letters inside property names (eg 'CoPyright'
    for 'CP'); they carry no meaning.

    """
    return "".join(c for c in identifier if c.isupper())


def interpret_go_point(s):
    """Convert an SGF Point, Move, or Stone value to coordinates.

    s -- unescaped raw value

    Returns a pair (x, y), zero-based, with x taken from the first letter.

    Raises ValueError unless the value is exactly two lower-case letters.

    """
    if len(s) != 2 or not ("a" <= s[0] <= "z" and "a" <= s[1] <= "z"):
        raise ValueError("malformed point: %r" % s)
    return ord(s[0]) - 97, ord(s[1]) - 97  # 97 == ord("a")


class GameResult(NamedTuple):
    """Interpreted RE value.

    winner -- 'b', 'w', or None
    reason -- one of 'points', 'resign', 'time', 'forfeit', 'unspecified',
              'draw', 'void', 'unknown'
    score  -- float for a win on points, otherwise None

    """
    winner: Optional[str]
    reason: str
    score: Optional[float] = None

    @property
    def loser(self):
        if self.winner is None:
            return None
        return opponent_of(self.winner)


class VariationStyle(NamedTuple):
    """Interpreted ST value."""
    show_siblings: bool
    board_markup: bool


def interpret_none(s):
    """Convert a raw None value to a boolean.

    The value must be empty; returns True.

    """
    if s != "":
        raise ValueError("expected empty value")
    return True


_number_re = re.compile(r"\A\s*[+-]?[0-9]+\s*\Z")


def interpret_number(s):
    """Convert a raw Number value to the integer it represents.

    This is a little more lenient than the SGF spec: it permits arbitrary
    leading and trailing whitespace.

    """
    if not _number_re.match(s):
        raise ValueError("malformed number: %r" % s)
    return int(s, 10)


def interpret_real(s):
    """Convert a raw Real value to the float it represents.

    This is more lenient than the SGF spec: it accepts strings accepted as a
    float by Python's float() (eg "1e3"). It rejects infinities and NaNs.

    """
    try:
        result = float(s)
    except ValueError:
        raise ValueError("malformed real: %r" % s)
    if isinf(result):
        raise ValueError("infinite")
    if isnan(result):
        raise ValueError("not a number")
    return result


def interpret_double(s):
    """Convert a raw Double value to an integer.

    Returns 1 (normal) or 2 (emphasized).

    """
    value = s.strip()
    if value not in ("1", "2"):
        raise ValueError("malformed double: %r" % s)
    return int(value)


def interpret_colour(s):
    """Convert a raw Color value to a colour.

    Returns 'b' or 'w'.

    """
    colour = s.strip().lower()
    if colour not in ('b', 'w'):
        raise ValueError("malformed colour: %r" % s)
    return colour


def interpret_simpletext(s):
    """Convert a raw SimpleText value to a string.

    See sgf_grammar.simpletext_value() for details.

    """
    return sgf_grammar.simpletext_value(s)


def interpret_text(s):
    """Convert a raw Text value to a string.

    See sgf_grammar.text_value() for details.

    """
    return sgf_grammar.text_value(s)


def interpret_point(s):
    """Convert a raw SGF Point or Stone value to coordinates.

    See interpret_go_point() above for details.

    """
    return interpret_go_point(s)


def interpret_move(s):
    """Convert a raw SGF Move value to coordinates.

    Returns a pair (x, y), or None for a pass (an empty value or 'tt').

    """
    if s == "" or s == "tt":
        return None
    return interpret_go_point(s)


def interpret_point_list(values):
    """Convert a raw SGF list of Points to a tuple of coordinates.

    values -- list of strings

    Returns a tuple of pairs (x, y), in the order given, without repeats.

    If 'values' is empty, returns an empty tuple.

    This interprets compressed point lists: 'ul:lr' stands for every point of
    the rectangle with upper-left corner ul and lower-right corner lr, taken
    row by row.

    Raises ValueError if the data is otherwise malformed.

    """
    result = []
    for s in values:
        p1, is_rectangle, p2 = s.partition(":")
        if is_rectangle:
            left, top = interpret_point(p1)
            right, bottom = interpret_point(p2)
            if not (left <= right and top <= bottom):
                raise ValueError("malformed rectangle: %r" % s)
            for y in range(top, bottom + 1):
                for x in range(left, right + 1):
                    result.append((x, y))
        else:
            result.append(interpret_point(p1))
    return tuple(dict.fromkeys(result))


def interpret_AP(s):
    """Interpret an AP (application) property value.

    Returns a pair of strings (name, version number)

    Permits the version number to be missing (which is forbidden by the SGF
    spec), in which case the second returned value is an empty string.

    """
    application, version = sgf_grammar.parse_compose(s)
    if version is None:
        version = ""
    return interpret_simpletext(application), interpret_simpletext(version)


def interpret_ARLN_list(values):
    """Interpret an AR (arrow) or LN (line) property value.

    Returns a tuple of pairs (point, point), where point is a pair (x, y)

    """
    result = []
    for s in values:
        p1, p2 = sgf_grammar.parse_compose(s)
        if p2 is None:
            raise ValueError("expected point:point, got %r" % s)
        result.append((interpret_point(p1), interpret_point(p2)))
    return tuple(result)


def interpret_FG(s):
    """Interpret an FG (figure) property value.

    Returns a pair (flags, string), or None.

    flags is an integer; see http://www.red-bean.com/sgf/properties.html#FG

    """
    if s == "":
        return None
    flags, name = sgf_grammar.parse_compose(s)
    if name is None:
        raise ValueError("expected number:text, got %r" % s)
    return interpret_number(flags), interpret_simpletext(name)


def interpret_LB_list(values):
    """Interpret an LB (label) property value.

    Returns a tuple of pairs ((x, y), string).

    """
    result = []
    for s in values:
        point, label = sgf_grammar.parse_compose(s)
        if label is None:
            raise ValueError("expected point:text, got %r" % s)
        result.append((interpret_point(point), interpret_simpletext(label)))
    return tuple(result)


def interpret_size(s):
    """Interpret an SZ (board size) property value.

    Returns a pair (columns, rows). A single number means a square board.

    """
    columns, rows = sgf_grammar.parse_compose(s)
    columns = interpret_number(columns)
    rows = columns if rows is None else interpret_number(rows)
    if not (1 <= columns <= 52 and 1 <= rows <= 52):
        raise ValueError("size out of range: %r" % s)
    return columns, rows


_result_reasons = {
    "R": "resign", "Resign": "resign",
    "T": "time", "Time": "time",
    "F": "forfeit", "Forfeit": "forfeit",
}


def interpret_result(s):
    """Interpret an RE (result) property value.

    Returns a GameResult.

    Accepts the forms listed at http://www.red-bean.com/sgf/properties.html#RE
    ("0", "Draw", "B+", "B+R", "W+12.5", "Void", "?", ...).

    """
    value = interpret_simpletext(s).strip()
    if value in ("0", "Draw", "D"):
        return GameResult(None, "draw")
    if value == "Void":
        return GameResult(None, "void")
    if value == "?":
        return GameResult(None, "unknown")
    colour, plus, detail = value.partition("+")
    if not plus or colour not in ("B", "W"):
        raise ValueError("malformed result: %r" % s)
    winner = colour.lower()
    if detail == "":
        return GameResult(winner, "unspecified")
    if detail in _result_reasons:
        return GameResult(winner, _result_reasons[detail])
    return GameResult(winner, "points", interpret_real(detail))


def interpret_style(s):
    """Interpret an ST (variation display style) property value.

    Returns a VariationStyle.

    """
    style = interpret_number(s)
    if not 0 <= style <= 3:
        raise ValueError("style out of range: %r" % s)
    return VariationStyle(show_siblings=bool(style & 1), board_markup=not style & 2)


def interpret_charset(s):
    """Interpret a CA (charset) property value.

    Returns the normalised encoding name (see normalise_charset_name()).

    """
    try:
        return normalise_charset_name(interpret_simpletext(s).strip())
    except LookupError:
        raise ValueError("unknown charset: %r" % s)


class TokenKind(enum.Enum):
    MOVE = "move"
    SETUP = "setup"
    COMMENT = "comment"
    ANNOTATION = "annotation"
    MARKUP = "markup"
    ROOT = "root"
    GAME_INFO = "game-info"
    TIMING = "timing"
    MISCELLANEOUS = "miscellaneous"
    UNKNOWN = "unknown"
    INVALID = "invalid"


@dataclass(frozen=True)
class Token:
    """A decoded property occurrence.

    kind       -- TokenKind
    identifier -- PropIdent as written in the source
    name       -- identifier with lower-case letters dropped
    value      -- interpreted value (None for UNKNOWN and INVALID tokens)
    raw_values -- tuple of unescaped raw values
    reason     -- why the value was rejected (INVALID tokens only)
    colour     -- 'b' or 'w' for colour-specific properties (B, AW, PB, ...)

    """
    kind: TokenKind
    identifier: str
    name: str
    value: object = None
    raw_values: Tuple[str, ...] = ()
    reason: Optional[str] = None
    colour: Optional[str] = None

    @property
    def is_unknown(self):
        return self.kind is TokenKind.UNKNOWN

    @property
    def is_invalid(self):
        return self.kind is TokenKind.INVALID

    @property
    def is_valid(self):
        return not (self.is_unknown or self.is_invalid)

    def is_root(self):
        """Check whether this is a valid root property (AP CA FF GM ST SZ).

        Root properties are only meaningful in the root node of a game.

        """
        return self.kind is TokenKind.ROOT

    def __str__(self):
        """SGF-like description of the token, for debugging."""
        def fmt(s):
            return s.replace("\\", "\\\\").replace("]", "\\]")
        return self.identifier + "".join("[%s]" % fmt(s) for s in self.raw_values)


class PropertyType:
    """Description of a property type."""
    def __init__(self, kind, interpreter, uses_list,
                 allows_empty_list=False, colour=None):
        self.kind = kind
        self.interpreter = interpreter
        self.uses_list = bool(uses_list)
        self.allows_empty_list = bool(allows_empty_list)
        self.colour = colour


_interpreters_by_type_name = {
    'none' :        interpret_none,
    'number' :      interpret_number,
    'real' :        interpret_real,
    'double' :      interpret_double,
    'colour' :      interpret_colour,
    'simpletext' :  interpret_simpletext,
    'text' :        interpret_text,
    'point' :       interpret_point,
    'move' :        interpret_move,
    'point_list' :  interpret_point_list,
    'point_elist' : interpret_point_list,
    'stone_list' :  interpret_point_list,
    'AP' :          interpret_AP,
    'ARLN_list' :   interpret_ARLN_list,
    'FG' :          interpret_FG,
    'LB_list' :     interpret_LB_list,
    'size' :        interpret_size,
    'result' :      interpret_result,
    'style' :       interpret_style,
    'charset' :     interpret_charset,
}


def make_property_type(kind, type_name, colour=None):
    """Return a PropertyType using one of the built-in value types.

    kind      -- TokenKind for valid values
    type_name -- eg 'number', 'point_list', 'point_elist', 'LB_list'
    colour    -- 'b', 'w', or None

    """
    return PropertyType(
        kind,
        _interpreters_by_type_name[type_name],
        uses_list=type_name.endswith("_list"),
        allows_empty_list=(type_name == 'point_elist'),
        colour=colour)


K = TokenKind
T = make_property_type

_property_types_by_ident = {
  'AB' : T(K.SETUP, 'stone_list', 'b'),        # Add Black
  'AE' : T(K.SETUP, 'point_list'),             # Add Empty
  'AN' : T(K.GAME_INFO, 'simpletext'),         # Annotation
  'AP' : T(K.ROOT, 'AP'),                      # Application
  'AR' : T(K.MARKUP, 'ARLN_list'),             # Arrow
  'AW' : T(K.SETUP, 'stone_list', 'w'),        # Add White
  'B'  : T(K.MOVE, 'move', 'b'),               # Black
  'BL' : T(K.TIMING, 'real', 'b'),             # Black time left
  'BM' : T(K.ANNOTATION, 'double'),            # Bad move
  'BR' : T(K.GAME_INFO, 'simpletext', 'b'),    # Black rank
  'BT' : T(K.GAME_INFO, 'simpletext', 'b'),    # Black team
  'C'  : T(K.COMMENT, 'text'),                 # Comment
  'CA' : T(K.ROOT, 'charset'),                 # Charset
  'CP' : T(K.GAME_INFO, 'simpletext'),         # Copyright
  'CR' : T(K.MARKUP, 'point_list'),            # Circle
  'DD' : T(K.MARKUP, 'point_elist'),           # Dim points          [inherit]
  'DM' : T(K.ANNOTATION, 'double'),            # Even position
  'DO' : T(K.ANNOTATION, 'none'),              # Doubtful
  'DT' : T(K.GAME_INFO, 'simpletext'),         # Date
  'EV' : T(K.GAME_INFO, 'simpletext'),         # Event
  'FF' : T(K.ROOT, 'number'),                  # Fileformat
  'FG' : T(K.MISCELLANEOUS, 'FG'),             # Figure
  'GB' : T(K.ANNOTATION, 'double'),            # Good for Black
  'GC' : T(K.GAME_INFO, 'text'),               # Game comment
  'GM' : T(K.ROOT, 'number'),                  # Game
  'GN' : T(K.GAME_INFO, 'simpletext'),         # Game name
  'GW' : T(K.ANNOTATION, 'double'),            # Good for White
  'HA' : T(K.GAME_INFO, 'number'),             # Handicap
  'HO' : T(K.ANNOTATION, 'double'),            # Hotspot
  'IT' : T(K.ANNOTATION, 'none'),              # Interesting
  'KM' : T(K.GAME_INFO, 'real'),               # Komi
  'KO' : T(K.MOVE, 'none'),                    # Ko
  'LB' : T(K.MARKUP, 'LB_list'),               # Label
  'LN' : T(K.MARKUP, 'ARLN_list'),             # Line
  'MA' : T(K.MARKUP, 'point_list'),            # Mark
  'MN' : T(K.MOVE, 'number'),                  # set move number
  'N'  : T(K.COMMENT, 'simpletext'),           # Nodename
  'OB' : T(K.TIMING, 'number', 'b'),           # OtStones Black
  'ON' : T(K.GAME_INFO, 'simpletext'),         # Opening
  'OT' : T(K.GAME_INFO, 'simpletext'),         # Overtime
  'OW' : T(K.TIMING, 'number', 'w'),           # OtStones White
  'PB' : T(K.GAME_INFO, 'simpletext', 'b'),    # Player Black
  'PC' : T(K.GAME_INFO, 'simpletext'),         # Place
  'PL' : T(K.SETUP, 'colour'),                 # Player to play
  'PM' : T(K.MISCELLANEOUS, 'number'),         # Print move mode     [inherit]
  'PW' : T(K.GAME_INFO, 'simpletext', 'w'),    # Player White
  'RE' : T(K.GAME_INFO, 'result'),             # Result
  'RO' : T(K.GAME_INFO, 'simpletext'),         # Round
  'RU' : T(K.GAME_INFO, 'simpletext'),         # Rules
  'SL' : T(K.MARKUP, 'point_list'),            # Selected
  'SO' : T(K.GAME_INFO, 'simpletext'),         # Source
  'SQ' : T(K.MARKUP, 'point_list'),            # Square
  'ST' : T(K.ROOT, 'style'),                   # Style
  'SZ' : T(K.ROOT, 'size'),                    # Size
  'TB' : T(K.MARKUP, 'point_elist', 'b'),      # Territory Black
  'TE' : T(K.ANNOTATION, 'double'),            # Tesuji
  'TM' : T(K.GAME_INFO, 'real'),               # Timelimit
  'TR' : T(K.MARKUP, 'point_list'),            # Triangle
  'TW' : T(K.MARKUP, 'point_elist', 'w'),      # Territory White
  'UC' : T(K.ANNOTATION, 'double'),            # Unclear pos
  'US' : T(K.GAME_INFO, 'simpletext'),         # User
  'V'  : T(K.ANNOTATION, 'real'),              # Value
  'VW' : T(K.MISCELLANEOUS, 'point_elist'),    # View                [inherit]
  'W'  : T(K.MOVE, 'move', 'w'),               # White
  'WL' : T(K.TIMING, 'real', 'w'),             # White time left
  'WR' : T(K.GAME_INFO, 'simpletext', 'w'),    # White rank
  'WT' : T(K.GAME_INFO, 'simpletext', 'w'),    # White team
}

del K, T


class Decoder:
    """Convert property occurrences to Tokens.

    See the _property_types_by_ident table above for a list of properties
    initially known, and their types.

    Unknown (private) properties become UNKNOWN tokens.

    """

    def __init__(self):
        self.property_types_by_ident = _property_types_by_ident.copy()

    def get_property_type(self, identifier):
        """Return the PropertyType for the specified PropIdent.

        Raises KeyError if the property is unknown.

        """
        return self.property_types_by_ident[identifier]

    def register_property(self, identifier, property_type):
        """Specify the PropertyType for a PropIdent."""
        if not sgf_grammar.is_valid_property_identifier(identifier):
            raise ValueError("ill-formed property identifier: %r" % identifier)
        self.property_types_by_ident[identifier] = property_type

    def deregister_property(self, identifier):
        """Forget the type for the specified PropIdent."""
        del self.property_types_by_ident[identifier]

    def interpret_as_type(self, property_type, raw_values):
        """Return the Python representation of a property value.

        property_type -- PropertyType
        raw_values    -- sequence of unescaped raw values

        Raises ValueError if it cannot interpret the value.

        elist handling: if the property's value type is a list type and
        'raw_values' holds a single empty string, passes an empty list to the
        interpreter if the type allows empty lists, and raises ValueError
        otherwise.

        """
        if not raw_values:
            raise ValueError("no raw values")
        if property_type.uses_list:
            if list(raw_values) == [""]:
                if not property_type.allows_empty_list:
                    raise ValueError("empty list")
                raw = []
            else:
                raw = list(raw_values)
        else:
            if len(raw_values) > 1:
                raise ValueError("multiple values")
            raw = raw_values[0]
        return property_type.interpreter(raw)

    def decode(self, identifier, raw_values):
        """Convert one property occurrence to a Token.

        identifier -- PropIdent as written (may contain lower-case letters)
        raw_values -- nonempty sequence of unescaped raw values

        Never raises for bad values: returns an UNKNOWN token if the property
        isn't known, and an INVALID token if its value can't be interpreted.

        """
        name = normalise_identifier(identifier)
        raw_values = tuple(raw_values)
        try:
            property_type = self.property_types_by_ident[name]
        except KeyError:
            logger.debug("unknown property %s", identifier)
            return Token(TokenKind.UNKNOWN, identifier, name, raw_values=raw_values)
        try:
            value = self.interpret_as_type(property_type, raw_values)
        except ValueError as e:
            reason = str(e) or "invalid value"
            logger.debug("invalid property %s: %s", identifier, reason)
            return Token(TokenKind.INVALID, identifier, name, raw_values=raw_values,
                         reason=reason, colour=property_type.colour)
        return Token(property_type.kind, identifier, name, value, raw_values,
                     colour=property_type.colour)
