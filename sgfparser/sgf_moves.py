"""Higher-level processing of moves and positions from parsed SGF games."""

from .common import opponent_of

_setup_identifiers = ("AB", "AW", "AE")


def get_setup_stones(node):
    """Retrieve Add Black / Add White / Add Empty properties from a node.

    Returns a tuple (black_points, white_points, empty_points)

    Each value is a tuple of pairs (x, y).

    Raises ValueError if any of these properties is malformed.

    """
    result = []
    for identifier in _setup_identifiers:
        try:
            result.append(node.get(identifier))
        except KeyError:
            result.append(())
    return tuple(result)


def has_setup_stones(node):
    """Check whether the node has any AB/AW/AE properties."""
    return any(node.has_property(identifier) for identifier in _setup_identifiers)


def get_setup_and_moves(game_tree):
    """Return the initial setup and the following moves from a GameTree.

    Returns a pair (setup, plays)

      setup -- tuple (black_points, white_points, empty_points) from the root
      plays -- list of pairs (colour, move)
               moves are (x, y), or None for a pass.

    The moves are from the game's 'leftmost' variation.

    Raises ValueError if there are any AB/AW/AE properties after the root
    node, if the root node mixes setup stones and a move, or if any move is
    malformed.

    Doesn't check whether the moves are legal.

    """
    nodes = game_tree.get_main_sequence()
    root = nodes[0]
    setup = get_setup_stones(root)
    if has_setup_stones(root):
        colour, move = root.get_move()
        if colour is not None:
            raise ValueError("mixed setup and moves in root node")
    moves = []
    for index, node in enumerate(nodes):
        if index and has_setup_stones(node):
            raise ValueError("setup properties after the root node")
        colour, move = node.get_move()
        if colour is not None:
            moves.append((colour, move))
    return setup, moves


def get_first_player(game_tree):
    """Return the colour of the player who moves first.

    Uses the root's PL property if present; otherwise the colour of the first
    move in the 'leftmost' variation; otherwise white if there is a handicap
    and black if not.

    """
    root = game_tree.get_root()
    try:
        return root.get("PL")
    except KeyError:
        pass
    for node in game_tree.get_main_sequence():
        colour, move = node.get_move()
        if colour is not None:
            return colour
    if game_tree.get_handicap() is not None:
        return 'w'
    return 'b'


def get_next_player(game_tree):
    """Return the colour of the player to move at the end of the main line."""
    _, moves = get_setup_and_moves(game_tree)
    if not moves:
        return get_first_player(game_tree)
    colour, move = moves[-1]
    return opponent_of(colour)
