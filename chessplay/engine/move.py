from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .errors import InvalidSquareError


# (row, col); row 0 is rank 8 (black's back rank), row 7 is rank 1
Square = Tuple[int, int]

PROMOTION_PIECES = {"q", "r", "b", "n"}
FILES = "abcdefgh"


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    A move only describes intent; ``apply_move`` is the only way it changes a
    position.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        promotion (Optional[str]): Lowercase promotion piece, if any.
        castle (Optional[str]): ``"K"`` or ``"Q"`` for king/queen-side castling.
        double_step (bool): Pawn advanced two squares (sets the en-passant target).
        ep_capture (Optional[Square]): Square of the pawn taken en passant.
        capture (bool): Move removes an opponent piece.
    """

    from_sq: Square
    to_sq: Square
    promotion: Optional[str] = None
    castle: Optional[str] = None
    double_step: bool = False
    ep_capture: Optional[Square] = None
    capture: bool = False

    def to_uci(self) -> str:
        """Serialize the move into coordinate notation.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + (self.promotion or "")

    def with_promotion(self, piece: str) -> "Move":
        """Return a copy of this promoting move with a different promotion piece.

        Raises:
            ValueError: If the move does not promote or ``piece`` is invalid.
        """
        if self.promotion is None:
            raise ValueError("move is not a promotion")
        piece = piece.lower()
        if piece not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {piece!r}")
        return replace(self, promotion=piece)

    def same_squares(self, other: "Move") -> bool:
        return self.from_sq == other.from_sq and self.to_sq == other.to_sq


def parse_uci(uci: str) -> Move:
    """Parse a coordinate-notation move string.

    The result carries only squares and promotion; flags such as castling or
    en passant are resolved against the legal move list by the caller.

    Args:
        uci (str): Move such as ``"e2e4"`` or ``"e7e8n"``.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[str] = None
    if len(uci) == 5:
        promo = uci[4].lower()
        if promo not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {promo!r}")
    return Move(from_sq, to_sq, promo)


def inside(row: int, col: int) -> bool:
    return 0 <= row < 8 and 0 <= col < 8


def check_square(sq: Square) -> Square:
    """Return ``sq`` unchanged if it lies on the board.

    Raises:
        InvalidSquareError: If either coordinate is outside ``0..7``.
    """
    row, col = sq
    if not inside(row, col):
        raise InvalidSquareError(f"square out of range: {sq!r}")
    return sq


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a ``(row, col)`` square.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: ``(row, col)`` with row 0 on rank 8.

    Raises:
        InvalidSquareError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise InvalidSquareError(f"invalid square: {s!r}")
    col = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return row, col


def square_to_str(sq: Square) -> str:
    """Convert a ``(row, col)`` square into algebraic notation.

    Raises:
        InvalidSquareError: If ``sq`` is outside the board.
    """
    row, col = check_square(sq)
    return FILES[col] + str(8 - row)
