"""Exceptions raised by PyMAFE."""


class InvalidInputError(ValueError):
    """Raised when study data are malformed or statistically degenerate.

    Subclasses :obj:`ValueError`, so callers that already guard against bad
    values do not need to special-case it.
    """
