from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Tuple

from .move import Square, check_square


WHITE, BLACK = "w", "b"
PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = "p", "n", "b", "r", "q", "k"
PIECE_KINDS = (PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING)

BACK_RANK = (ROOK, KNIGHT, BISHOP, QUEEN, KING, BISHOP, KNIGHT, ROOK)


def opponent(color: str) -> str:
    return BLACK if color == WHITE else WHITE


def home_row(color: str) -> int:
    """Row of ``color``'s back rank (white plays up the board from row 7)."""
    return 7 if color == WHITE else 0


def pawn_direction(color: str) -> int:
    return -1 if color == WHITE else 1


@dataclass
class Piece:
    kind: str
    color: str
    has_moved: bool = False

    def symbol(self) -> str:
        """Return the FEN letter: uppercase for white, lowercase for black."""
        return self.kind.upper() if self.color == WHITE else self.kind

    def copy(self) -> "Piece":
        return replace(self)


Grid = List[List[Optional[Piece]]]


def _empty_grid() -> Grid:
    return [[None] * 8 for _ in range(8)]


@dataclass
class Board:
    """8x8 grid of optional pieces.

    Notes:
    - Squares are ``(row, col)``; row 0 is black's back rank (rank 8).
    - No placement validation happens here; callers are trusted.
    """

    grid: Grid = field(default_factory=_empty_grid)

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board with the standard initial piece placement."""
        board = cls()
        for col, kind in enumerate(BACK_RANK):
            board.grid[0][col] = Piece(kind, BLACK)
            board.grid[1][col] = Piece(PAWN, BLACK)
            board.grid[6][col] = Piece(PAWN, WHITE)
            board.grid[7][col] = Piece(kind, WHITE)
        return board

    def clone(self) -> "Board":
        """Deep copy of the grid; pieces are copied so no state is aliased."""
        return Board(grid=[[p.copy() if p else None for p in row] for row in self.grid])

    def piece_at(self, sq: Square) -> Optional[Piece]:
        row, col = check_square(sq)
        return self.grid[row][col]

    def set_piece(self, sq: Square, piece: Optional[Piece]) -> None:
        row, col = check_square(sq)
        self.grid[row][col] = piece

    def clear(self, sq: Square) -> Optional[Piece]:
        """Empty ``sq`` and return whatever stood there."""
        row, col = check_square(sq)
        piece = self.grid[row][col]
        self.grid[row][col] = None
        return piece

    def pieces(self, color: Optional[str] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` pairs in row-major order."""
        for row in range(8):
            for col in range(8):
                piece = self.grid[row][col]
                if piece is not None and (color is None or piece.color == color):
                    yield (row, col), piece

    def king_square(self, color: str) -> Optional[Square]:
        for sq, piece in self.pieces(color):
            if piece.kind == KING:
                return sq
        return None
