"""Domain-dependent utility functions for sgfparser.

This is for Go-specific utilities.

"""

__all__ = ["opponent_of", "colour_name", "format_point", "format_point_list"]

_opponents = {"b": "w", "w": "b"}


def opponent_of(colour):
    """Return the opponent colour.

    colour -- 'b' or 'w'

    Returns 'b' or 'w'.

    """
    try:
        return _opponents[colour]
    except KeyError as e:
        raise ValueError from e


def colour_name(colour):
    """Return the (lower-case) full name of a colour.

    colour -- 'b' or 'w'

    """
    try:
        return {"b": "black", "w": "white"}[colour]
    except KeyError as e:
        raise ValueError from e


point_letters = "abcdefghijklmnopqrstuvwxyz"


def format_point(move):
    """Return coordinates as SGF letters like 'dd', or 'pass'.

    move -- pair (x, y), or None for a pass

    """
    if move is None:
        return "pass"
    x, y = move
    if not 0 <= x < 26 or not 0 <= y < 26:
        raise ValueError
    return point_letters[x] + point_letters[y]


def format_point_list(moves):
    """Return a list of coordinates as a string like 'aa,bb'."""
    return ",".join(map(format_point, moves))
