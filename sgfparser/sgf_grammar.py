"""Tokenise SGF data and build the coarse scope structure.

This is intended for use with SGF FF[4]; see http://www.red-bean.com/sgf/

Nothing in this module is Go-specific.

The lexical grammar is handled by lark; this module turns its output into
Coarse_game_trees and provides the helpers for splitting and cleaning up raw
property values.


In the documentation below, a _property list_ is a list of pairs
(identifier, values), one pair per property occurrence in a node, in document
order. 'values' is a nonempty list of unescaped raw property values.

An unescaped raw property value is a string containing a PropValue without its
enclosing brackets, with the escapes \\] and \\\\ interpreted and everything
else (including any other backslash) left untouched.

"""

import re

from lark import Lark, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from .errors import ParseError

_propident_re = re.compile(r"\A[A-Z]{1,64}\Z")
_unescape_re = re.compile(r"\\([\\\]])")

_GRAMMAR = r"""
collection: game_tree*

game_tree: "(" (node | game_tree)* ")"

node: ";" property*

property: PROP_IDENT PROP_VALUE+

PROP_IDENT: /[A-Za-z]+/
PROP_VALUE: /\[(?:[^\\\]]|\\.)*\]/s

%import common.WS
%ignore WS
"""


def is_valid_property_identifier(s):
    """Check whether 's' is a well-formed FF[4] PropIdent.

    Details:
     - it doesn't permit lower-case letters (the tokeniser accepts them, for
       the sake of FF[3] files, but they are never part of a property name)
     - it accepts at most 64 letters (there is no limit in FF[4]; no
       standard property has more than 2)

    """
    return bool(_propident_re.search(s))


def unescape_value(s):
    """Interpret the escapes in a raw property value.

    s -- the text between the brackets

    Replaces \\] with ] and \\\\ with a single backslash. Any other backslash is
    left as it is.

    """
    return _unescape_re.sub(r"\1", s)


class Coarse_game_tree:
    """An SGF GameTree scope.

    This is a direct representation of the SGF parse tree. It's 'coarse' in the
    sense that nodes are still property lists rather than decoded nodes.

    Public attributes
      items -- list of property lists (nodes) and Coarse_game_trees (nested
               scopes), in document order

    A well-formed FF[4] scope has all its nodes before its nested scopes, but
    this structure doesn't rely on that.

    """

    def __init__(self, items=None):
        self.items = [] if items is None else items

    def is_empty(self):
        """Check whether the scope (including nested scopes) holds no nodes."""
        to_check = [self]
        while to_check:
            game_tree = to_check.pop()
            for item in game_tree.items:
                if not isinstance(item, Coarse_game_tree):
                    return False
                to_check.append(item)
        return True


class _Coarse_builder(Transformer):
    """Builds Coarse_game_trees while lark parses (LALR inline transformer)."""

    def property(self, children):
        identifier, *values = children
        return str(identifier), [unescape_value(str(value)[1:-1]) for value in values]

    def node(self, children):
        return list(children)

    def game_tree(self, children):
        return Coarse_game_tree(list(children))

    def collection(self, children):
        return list(children)


_PARSER = Lark(
    _GRAMMAR,
    parser="lalr",
    start="collection",
    transformer=_Coarse_builder(),
)


def _position(exc):
    line = getattr(exc, "line", None)
    column = getattr(exc, "column", None)
    if line is None or line < 0:
        return None, None
    return line, column


def _describe(exc):
    if isinstance(exc, UnexpectedEOF):
        return "unexpected end of SGF data"
    if isinstance(exc, UnexpectedCharacters):
        return "unexpected character %r" % exc.char
    token = exc.token
    if token.type == "$END":
        if exc.expected == {"PROP_VALUE"}:
            return "property with no values"
        return "unexpected end of SGF data"
    if exc.expected == {"PROP_VALUE"}:
        return "property with no values"
    if token.type == "PROP_IDENT":
        return "property outside a node"
    if token.type == "PROP_VALUE":
        return "unexpected value"
    return "unexpected %r" % str(token)


def parse_sgf_collection(s):
    """Read an SGF collection, returning the parse trees.

    s -- string

    Returns a list of Coarse_game_trees, one per top-level GameTree. The list
    is empty if the data contains no GameTrees at all.

    Raises ParseError if the data isn't well-formed: unbalanced parentheses or
    brackets, a value without a property identifier, an identifier without a
    value, properties before the first node of a scope, or any other
    character outside a property value that isn't whitespace.

    If a property appears more than once in a node (which is not permitted by
    FF[4]), each occurrence is kept separately.

    """
    try:
        return _PARSER.parse(s)
    except (UnexpectedEOF, UnexpectedToken, UnexpectedCharacters) as exc:
        line, column = _position(exc)
        raise ParseError(_describe(exc), line, column) from exc


_split_compose_re = re.compile(r"( (?: [^\\:] | \\. )* ) :", re.VERBOSE | re.DOTALL)


def parse_compose(s):
    """Split the parts of an SGF Compose value.

    If the value is a well-formed Compose, returns a pair of strings.

    If it isn't (ie, there is no delimiter), returns the complete string and
    None.

    Interprets \\: as a literal colon, both when looking for the delimiter and
    in the returned strings.

    """
    if m := _split_compose_re.match(s):
        return _unescape_colons(m.group(1)), _unescape_colons(s[m.end() :])
    else:
        return _unescape_colons(s), None


def _unescape_colons(s):
    return s.replace("\\:", ":")


_newline_re = re.compile(r"\n\r|\r\n|\n|\r")
_whitespace_table = str.maketrans("\t\f\v", "   ")


def simpletext_value(s):
    """Convert an unescaped SimpleText property value to the string it represents.

    This does whitespace mapping:

    - linebreaks (LF, CR, LFCR, or CRLF) are replaced by a space
    - any other whitespace character is replaced by a space

    """
    return _newline_re.sub(" ", s).translate(_whitespace_table)


def text_value(s):
    """Convert an unescaped Text property value to the string it represents.

    This does whitespace mapping:

    - linebreak (LF, CR, LFCR, or CRLF) is converted to \\n
    - any other whitespace character is replaced by a space

    """
    return _newline_re.sub("\n", s).translate(_whitespace_table)
