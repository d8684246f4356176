"""Exceptions raised by sgfparser."""


class SgfError(ValueError):
    """Base class for errors reported by sgfparser."""


class ParseError(SgfError):
    """The SGF data is structurally malformed.

    Public attributes:
      reason -- short description of the problem
      line   -- 1-based line of the offending input, or None
      column -- 1-based column of the offending input, or None

    """

    def __init__(self, reason, line=None, column=None):
        self.reason = reason
        self.line = line
        self.column = column
        if line is None:
            message = reason
        else:
            message = "%s (line %d, column %d)" % (reason, line, column)
        super().__init__(message)
