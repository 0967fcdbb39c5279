from __future__ import annotations


class InvalidSquareError(ValueError):
    """Raised for coordinates outside the 8x8 board or malformed square names."""


class IllegalMoveError(ValueError):
    """Raised when a move is not in the current legal move list."""


class TerminalPositionError(ValueError):
    """Raised when a move is requested for a side that has no legal moves."""
