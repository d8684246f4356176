"""Represent parsed SGF games.

This is intended for use with SGF FF[4]; see http://www.red-bean.com/sgf/

"""

import logging

from . import sgf_grammar
from . import sgf_properties
from .errors import ParseError

logger = logging.getLogger(__name__)


class Node:
    """An SGF node.

    A Node is a list-like container of its children: it can be indexed,
    sliced, and iterated over like a list.

    A Node with no children is treated as having truth value false.

    Public attributes (treat as read-only):
      tokens   -- tuple of sgf_properties.Tokens, in document order
      children -- tuple of child Nodes

    A Node doesn't know its parent; see GameTree.get_sequence_above().

    Do not instantiate directly; retrieve from a GameTree.

    """
    def __init__(self, tokens):
        self._tokens = tuple(tokens)
        self._children = []

    def _add_child(self, node):
        self._children.append(node)

    @property
    def tokens(self):
        return self._tokens

    @property
    def children(self):
        return tuple(self._children)

    def __len__(self):
        return len(self._children)

    def __getitem__(self, key):
        return self._children[key]

    def index(self, child):
        return self._children.index(child)

    def get_unknown_tokens(self):
        """Return the node's UNKNOWN tokens, in document order."""
        return [token for token in self._tokens if token.is_unknown]

    def get_invalid_tokens(self):
        """Return the node's INVALID tokens, in document order."""
        return [token for token in self._tokens if token.is_invalid]

    def has_property(self, identifier):
        """Check whether the node has the specified property.

        identifier -- PropIdent without lower-case letters (eg 'CP')

        This counts UNKNOWN and INVALID occurrences too.

        """
        return any(token.name == identifier for token in self._tokens)

    def get(self, identifier):
        """Return the interpreted value of the specified property.

        If the property occurs more than once, returns the value of the first
        valid occurrence.

        Raises KeyError if the node does not have a property with the given
        identifier.

        Raises ValueError if every occurrence is INVALID or UNKNOWN.

        """
        rejected = None
        for token in self._tokens:
            if token.name != identifier:
                continue
            if token.is_valid:
                return token.value
            if rejected is None:
                rejected = token
        if rejected is None:
            raise KeyError(identifier)
        if rejected.is_unknown:
            raise ValueError("unknown property %s" % identifier)
        raise ValueError("bad %s property: %s" % (identifier, rejected.reason))

    def get_move(self):
        """Retrieve the move from a node.

        Returns a pair (colour, move)

        colour is 'b' or 'w'.

        move is (x, y), or None for a pass.

        Returns None, None if the node contains no B or W property.

        Raises ValueError if the move is malformed.

        """
        for token in self._tokens:
            if token.name in ("B", "W"):
                if not token.is_valid:
                    raise ValueError("bad %s property: %s"
                                     % (token.name, token.reason))
                return token.colour, token.value
        return None, None

    def __str__(self):
        """String description of the node, for debugging."""
        return "\n".join(str(token) for token in self._tokens) + "\n"


def build_game_tree(coarse_game_trees, decoder):
    """Construct a GameTree from a list of Coarse_game_trees.

    coarse_game_trees -- list of sgf_grammar.Coarse_game_tree
    decoder           -- sgf_properties.Decoder

    Walks each scope's items in document order. Each node is attached to the
    current attachment point (the previous node of the scope, or whatever was
    current when the scope was entered) and becomes the new attachment point.
    Nested scopes start from the attachment point current at that moment, so
    several scopes following the same node become branches of that node.

    The attachment point None stands for the list of roots.

    """
    roots = []
    node_count = 0
    # Each frame is [iterator over a scope's items, attachment point]
    stack = [[iter(coarse_game_trees), None]]
    while stack:
        frame = stack[-1]
        items, parent = frame
        for item in items:
            if isinstance(item, sgf_grammar.Coarse_game_tree):
                stack.append([iter(item.items), parent])
                break
            node = Node(decoder.decode(identifier, values)
                        for identifier, values in item)
            if parent is None:
                roots.append(node)
            else:
                parent._add_child(node)
            parent = frame[1] = node
            node_count += 1
        else:
            stack.pop()
    logger.debug("built game tree: %d roots, %d nodes", len(roots), node_count)
    return GameTree(roots)


class GameTree:
    """A parsed SGF collection.

    The tree holds an ordered sequence of root Nodes: normally one, but a
    collection with several games (or a scope with several nodes at top level
    of the document) gives several.

    Public attributes (treat as read-only):
      roots -- tuple of root Nodes

    The tree is never modified after parse() returns it.

    """
    def __init__(self, roots):
        self._roots = tuple(roots)

    @property
    def roots(self):
        return self._roots

    def get_root(self):
        """Return the first root node.

        Raises ValueError if the tree is empty.

        """
        if not self._roots:
            raise ValueError("empty game tree")
        return self._roots[0]

    def __len__(self):
        return sum(1 for _ in self.traverse())

    def traverse(self):
        """Iterate over all nodes, parents before children.

        Returns a new generator each time, yielding the roots in order, each
        followed by its subtree, children left to right.

        """
        to_visit = list(reversed(self._roots))
        while to_visit:
            node = to_visit.pop()
            yield node
            to_visit.extend(reversed(node._children))

    def get_unknown_nodes(self):
        """Return the nodes with at least one UNKNOWN token, in traversal order."""
        return [node for node in self.traverse() if node.get_unknown_tokens()]

    def get_invalid_nodes(self):
        """Return the nodes with at least one INVALID token, in traversal order."""
        return [node for node in self.traverse() if node.get_invalid_tokens()]

    def get_main_sequence(self):
        """Return the 'leftmost' variation.

        Returns a list of Nodes, from the first root to a leaf.

        """
        node = self.get_root()
        result = [node]
        while node:
            node = node[0]
            result.append(node)
        return result

    def get_sequence_above(self, node):
        """Return the partial variation leading to the specified node.

        node -- Node

        Returns a list of Nodes, from the root to the parent of 'node'.

        Raises ValueError if the node isn't part of this tree.

        """
        to_visit = [(root, ()) for root in reversed(self._roots)]
        while to_visit:
            current, ancestors = to_visit.pop()
            if current is node:
                return list(ancestors)
            path = ancestors + (current,)
            to_visit.extend((child, path) for child in reversed(current._children))
        raise ValueError("node doesn't belong to this game")

    def get_size(self):
        """Return the board size as a pair (columns, rows).

        Returns (19, 19) if the SZ property isn't present in the root node.

        Raises ValueError if the SZ property is malformed.

        """
        try:
            return self.get_root().get("SZ")
        except KeyError:
            return 19, 19

    def get_komi(self):
        """Return the komi as a float.

        Returns 0.0 if the KM property isn't present in the root node.

        Raises ValueError if the KM property is malformed.

        """
        try:
            return self.get_root().get("KM")
        except KeyError:
            return 0.0

    def get_handicap(self):
        """Return the number of handicap stones as a small integer.

        Returns None if the HA property isn't present, or has (illegal) value
        zero.

        Raises ValueError if the HA property is otherwise malformed.

        """
        try:
            handicap = self.get_root().get("HA")
        except KeyError:
            return None
        if handicap == 0:
            handicap = None
        elif handicap == 1 or handicap < 0:
            raise ValueError("bad HA property: %d" % handicap)
        return handicap

    def get_player_name(self, colour):
        """Return the name of the specified player.

        Returns None if there is no corresponding 'PB' or 'PW' property.

        """
        try:
            return self.get_root().get({'b' : 'PB', 'w' : 'PW'}[colour])
        except KeyError:
            return None

    def get_winner(self):
        """Return the colour of the winning player.

        Returns None if there is no RE property, or if neither player won.

        Raises ValueError if the RE property is malformed.

        """
        try:
            result = self.get_root().get("RE")
        except KeyError:
            return None
        return result.winner


_default_decoder = sgf_properties.Decoder()


def parse(s, decoder=None, allow_empty=False):
    """Parse SGF data, returning a GameTree.

    s           -- string
    decoder     -- sgf_properties.Decoder (optional)
    allow_empty -- bool (default False)

    Raises ParseError if the data is structurally malformed (see
    sgf_grammar.parse_sgf_collection()); never returns a partial tree.

    A document without any nodes (eg "" or "()") raises ParseError, unless
    'allow_empty' is true, in which case the result is a GameTree with no
    roots. Empty nested scopes are always accepted.

    Unrecognised or malformed property values don't cause an error; they are
    recorded as UNKNOWN or INVALID tokens (see get_unknown_nodes() and
    get_invalid_nodes()).

    """
    if not isinstance(s, str):
        raise TypeError("expected string, given %s" % type(s).__name__)
    if decoder is None:
        decoder = _default_decoder
    coarse_game_trees = sgf_grammar.parse_sgf_collection(s)
    game_tree = build_game_tree(coarse_game_trees, decoder)
    if not game_tree.roots and not allow_empty:
        raise ParseError("no SGF nodes found")
    return game_tree
