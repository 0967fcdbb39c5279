from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from .board import BLACK, KING, PAWN, PIECE_KINDS, ROOK, WHITE, Board, Piece, home_row
from .move import Square, square_to_str, str_to_square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass
class CastlingRights:
    """Four independent castling flags; once cleared they are never set again."""

    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    def get(self, color: str, side: str) -> bool:
        """Return the right for ``color`` on ``side`` (``"K"`` or ``"Q"``)."""
        if color == WHITE:
            return self.white_king_side if side == "K" else self.white_queen_side
        return self.black_king_side if side == "K" else self.black_queen_side

    def revoke(self, color: str, side: str) -> None:
        if color == WHITE:
            if side == "K":
                self.white_king_side = False
            else:
                self.white_queen_side = False
        else:
            if side == "K":
                self.black_king_side = False
            else:
                self.black_queen_side = False

    def revoke_all(self, color: str) -> None:
        self.revoke(color, "K")
        self.revoke(color, "Q")

    def to_fen(self) -> str:
        flags = (
            ("K", self.white_king_side),
            ("Q", self.white_queen_side),
            ("k", self.black_king_side),
            ("q", self.black_queen_side),
        )
        out = "".join(ch for ch, on in flags if on)
        return out or "-"

    @classmethod
    def from_fen(cls, field_str: str) -> "CastlingRights":
        if field_str == "-":
            return cls.none()
        for ch in field_str:
            if ch not in "KQkq":
                raise ValueError("invalid castling rights")
        return cls(
            white_king_side="K" in field_str,
            white_queen_side="Q" in field_str,
            black_king_side="k" in field_str,
            black_queen_side="q" in field_str,
        )

    def copy(self) -> "CastlingRights":
        return replace(self)


@dataclass
class Position:
    """Complete mutable game state threaded through generation and search.

    ``move_number`` starts at 1 and advances after each black move.
    """

    board: Board
    side_to_move: str = WHITE
    castling: CastlingRights = field(default_factory=CastlingRights)
    ep_square: Optional[Square] = None
    move_number: int = 1

    @classmethod
    def startpos(cls) -> "Position":
        return cls(board=Board.startpos())

    def copy(self) -> "Position":
        """Independent deep copy, used for undo snapshots and search rollback."""
        return Position(
            board=self.board.clone(),
            side_to_move=self.side_to_move,
            castling=self.castling.copy(),
            ep_square=self.ep_square,
            move_number=self.move_number,
        )

    def restore(self, snapshot: "Position") -> None:
        """Overwrite this position in place with the contents of ``snapshot``.

        The snapshot's board and rights are adopted, not copied: a snapshot
        must be discarded after it has been restored.
        """
        self.board = snapshot.board
        self.side_to_move = snapshot.side_to_move
        self.castling = snapshot.castling
        self.ep_square = snapshot.ep_square
        self.move_number = snapshot.move_number

    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from a (simplified) FEN string.

        Piece placement, side to move, castling and en-passant fields are
        required; the two move counters are optional. Only the fullmove
        number is kept.

        Raises:
            ValueError: If ``fen`` is empty or any field is malformed.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) not in (4, 6):
            raise ValueError("FEN must have 4 or 6 fields")
        placement, stm, castling_field, ep = parts[:4]

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        board = Board.empty()
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                else:
                    kind = ch.lower()
                    if kind not in PIECE_KINDS:
                        raise ValueError(f"invalid piece in FEN: {ch!r}")
                    if col >= 8:
                        raise ValueError("too many squares in FEN rank")
                    color = WHITE if ch.isupper() else BLACK
                    board.grid[row][col] = Piece(kind, color)
                    col += 1
            if col != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in (WHITE, BLACK):
            raise ValueError("side to move must be 'w' or 'b'")

        castling = CastlingRights.from_fen(castling_field)

        ep_square: Optional[Square]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            # Target lies on rank 3 or 6
            if ep_square[0] not in (2, 5):
                raise ValueError("invalid en passant square rank")

        move_number = 1
        if len(parts) == 6:
            try:
                halfmove = int(parts[4])
                move_number = int(parts[5])
            except ValueError as e:
                raise ValueError("invalid move counters in FEN") from e
            if halfmove < 0 or move_number <= 0:
                raise ValueError("invalid move counters in FEN")

        _infer_has_moved(board, castling)
        return cls(
            board=board,
            side_to_move=stm,
            castling=castling,
            ep_square=ep_square,
            move_number=move_number,
        )

    def to_fen(self) -> str:
        """Serialize into a six-field FEN string (halfmove clock is always 0)."""
        ranks_str: List[str] = []
        for row in self.board.grid:
            run = 0
            out = []
            for piece in row:
                if piece is None:
                    run += 1
                    continue
                if run > 0:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol())
            if run > 0:
                out.append(str(run))
            ranks_str.append("".join(out))
        placement = "/".join(ranks_str)
        ep = square_to_str(self.ep_square) if self.ep_square is not None else "-"
        return f"{placement} {self.side_to_move} {self.castling.to_fen()} {ep} 0 {self.move_number}"


def _infer_has_moved(board: Board, castling: CastlingRights) -> None:
    # FEN carries no move history: pawns off their start rank have moved,
    # kings and rooks count as unmoved only while a castling right needs them.
    for (row, col), piece in board.pieces():
        back = home_row(piece.color)
        if piece.kind == PAWN:
            start = 6 if piece.color == WHITE else 1
            piece.has_moved = row != start
        elif piece.kind == KING:
            has_right = castling.get(piece.color, "K") or castling.get(piece.color, "Q")
            piece.has_moved = not (has_right and (row, col) == (back, 4))
        elif piece.kind == ROOK:
            unmoved = ((row, col) == (back, 7) and castling.get(piece.color, "K")) or (
                (row, col) == (back, 0) and castling.get(piece.color, "Q")
            )
            piece.has_moved = not unmoved
