from __future__ import annotations

from typing import Optional

from .board import KING, ROOK, WHITE, BLACK, Piece, home_row
from .move import Move, Square
from .position import CastlingRights, Position


def apply_move(position: Position, move: Move) -> Optional[Piece]:
    """Apply ``move`` to ``position`` in place and return the captured piece.

    Handles captures (including en passant), castling rook transfer,
    promotion, the en-passant target and castling rights. Side to move and
    the move counter are left untouched; see ``make_move``.

    Raises:
        ValueError: If ``from_sq`` is empty.
    """
    board = position.board
    grid = board.grid
    fr, fc = move.from_sq
    tr, tc = move.to_sq
    piece = grid[fr][fc]
    if piece is None:
        raise ValueError("no piece to move from from_sq")

    # Captured piece: en-passant victim sits beside the mover, not on to_sq
    if move.ep_capture is not None:
        er, ec = move.ep_capture
        captured = grid[er][ec]
        grid[er][ec] = None
    else:
        captured = grid[tr][tc]

    moved = Piece(piece.kind, piece.color, has_moved=True)
    grid[tr][tc] = moved
    grid[fr][fc] = None

    if move.castle == "K":
        rook = grid[tr][7]
        grid[tr][7] = None
        if rook is not None:
            grid[tr][5] = Piece(rook.kind, rook.color, has_moved=True)
    elif move.castle == "Q":
        rook = grid[tr][0]
        grid[tr][0] = None
        if rook is not None:
            grid[tr][3] = Piece(rook.kind, rook.color, has_moved=True)

    if move.promotion:
        grid[tr][tc] = Piece(move.promotion, piece.color, has_moved=True)

    # Valid for exactly one ply
    if move.double_step:
        position.ep_square = ((fr + tr) // 2, fc)
    else:
        position.ep_square = None

    _update_castling_rights(position.castling, piece, move.from_sq, move.to_sq, captured)
    return captured


def make_move(position: Position, move: Move) -> Optional[Piece]:
    """Apply ``move`` and pass the turn; advances the move number after black."""
    captured = apply_move(position, move)
    if position.side_to_move == BLACK:
        position.move_number += 1
    position.side_to_move = BLACK if position.side_to_move == WHITE else WHITE
    return captured


def _update_castling_rights(
    rights: CastlingRights,
    moved: Piece,
    from_sq: Square,
    to_sq: Square,
    captured: Optional[Piece],
) -> None:
    """Clear rights lost by king/rook moves and rook captures on home squares."""
    if moved.kind == KING:
        rights.revoke_all(moved.color)
    elif moved.kind == ROOK:
        side = _rook_home_side(moved.color, from_sq)
        if side is not None:
            rights.revoke(moved.color, side)
    if captured is not None and captured.kind == ROOK:
        side = _rook_home_side(captured.color, to_sq)
        if side is not None:
            rights.revoke(captured.color, side)


def _rook_home_side(color: str, sq: Square) -> Optional[str]:
    row, col = sq
    if row != home_row(color):
        return None
    if col == 7:
        return "K"
    if col == 0:
        return "Q"
    return None
