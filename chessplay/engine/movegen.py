from __future__ import annotations

from typing import List, Optional, Tuple

from .apply import apply_move
from .attacks import DIAGONAL, KING_OFFSETS, KNIGHT_OFFSETS, ORTHOGONAL, in_check, is_attacked
from .board import (
    BISHOP,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    Piece,
    home_row,
    opponent,
    pawn_direction,
)
from .move import Move, Square, check_square, inside
from .position import Position


Offsets = Tuple[Tuple[int, int], ...]

# Generated promotions are always to a queen; callers may substitute at commit.
DEFAULT_PROMOTION = QUEEN


def pseudo_moves(position: Position, sq: Square) -> List[Move]:
    """Return pseudo-legal moves for the piece on ``sq``.

    Moves follow the piece's movement pattern and board occupancy but may
    leave the mover's king attacked. An empty square yields no moves.

    Raises:
        InvalidSquareError: If ``sq`` is off the board.
    """
    row, col = check_square(sq)
    piece = position.board.grid[row][col]
    if piece is None:
        return []
    moves: List[Move] = []
    kind = piece.kind
    if kind == PAWN:
        _pawn_moves(position, sq, piece, moves)
    elif kind == KNIGHT:
        _step_moves(position, sq, piece, KNIGHT_OFFSETS, moves)
    elif kind == BISHOP:
        _slide_moves(position, sq, piece, DIAGONAL, moves)
    elif kind == ROOK:
        _slide_moves(position, sq, piece, ORTHOGONAL, moves)
    elif kind == QUEEN:
        _slide_moves(position, sq, piece, DIAGONAL + ORTHOGONAL, moves)
    elif kind == KING:
        _step_moves(position, sq, piece, KING_OFFSETS, moves)
        _castling_moves(position, sq, piece, moves)
    else:
        raise ValueError(f"unknown piece kind: {kind!r}")
    return moves


def legal_moves(position: Position, color: Optional[str] = None) -> List[Move]:
    """Return legal moves for ``color`` (default: side to move).

    Each pseudo-legal candidate is applied to a disposable copy of the
    position; it is kept only if ``color``'s king is not attacked afterwards.
    """
    color = position.side_to_move if color is None else color
    legal: List[Move] = []
    for sq, _piece in list(position.board.pieces(color)):
        for mv in pseudo_moves(position, sq):
            if _leaves_king_safe(position, mv, color):
                legal.append(mv)
    return legal


def has_legal_moves(position: Position, color: Optional[str] = None) -> bool:
    """Return True if ``color`` (default: side to move) has any legal move."""
    color = position.side_to_move if color is None else color
    for sq, _piece in list(position.board.pieces(color)):
        for mv in pseudo_moves(position, sq):
            if _leaves_king_safe(position, mv, color):
                return True
    return False


def _leaves_king_safe(position: Position, move: Move, color: str) -> bool:
    scratch = position.copy()
    apply_move(scratch, move)
    return not in_check(scratch.board, color)


def _pawn_moves(position: Position, sq: Square, piece: Piece, out: List[Move]) -> None:
    grid = position.board.grid
    r, c = sq
    color = piece.color
    d = pawn_direction(color)
    start_row = 6 if color == WHITE else 1
    last_row = 0 if color == WHITE else 7

    # Pushes
    nr = r + d
    if inside(nr, c) and grid[nr][c] is None:
        if nr == last_row:
            out.append(Move(sq, (nr, c), promotion=DEFAULT_PROMOTION))
        else:
            out.append(Move(sq, (nr, c)))
        if r == start_row and grid[r + 2 * d][c] is None:
            out.append(Move(sq, (r + 2 * d, c), double_step=True))

    # Captures
    for dc in (-1, 1):
        nc = c + dc
        if not inside(nr, nc):
            continue
        target = grid[nr][nc]
        if target is not None and target.color != color:
            promo = DEFAULT_PROMOTION if nr == last_row else None
            out.append(Move(sq, (nr, nc), promotion=promo, capture=True))

    # En passant: victim stands on the mover's rank, beside it
    ep = position.ep_square
    if ep is not None and r == (3 if color == WHITE else 4) and ep[0] == nr and abs(ep[1] - c) == 1:
        victim = grid[r][ep[1]]
        if victim is not None and victim.kind == PAWN and victim.color != color:
            out.append(Move(sq, ep, ep_capture=(r, ep[1]), capture=True))


def _step_moves(
    position: Position, sq: Square, piece: Piece, offsets: Offsets, out: List[Move]
) -> None:
    grid = position.board.grid
    r, c = sq
    for dr, dc in offsets:
        tr, tc = r + dr, c + dc
        if not inside(tr, tc):
            continue
        target = grid[tr][tc]
        if target is None:
            out.append(Move(sq, (tr, tc)))
        elif target.color != piece.color:
            out.append(Move(sq, (tr, tc), capture=True))


def _slide_moves(
    position: Position, sq: Square, piece: Piece, directions: Offsets, out: List[Move]
) -> None:
    grid = position.board.grid
    r, c = sq
    for dr, dc in directions:
        tr, tc = r + dr, c + dc
        while inside(tr, tc):
            target = grid[tr][tc]
            if target is None:
                out.append(Move(sq, (tr, tc)))
            else:
                if target.color != piece.color:
                    out.append(Move(sq, (tr, tc), capture=True))
                break
            tr += dr
            tc += dc


def _castling_moves(position: Position, sq: Square, piece: Piece, out: List[Move]) -> None:
    color = piece.color
    row = home_row(color)
    if sq != (row, 4):
        return
    grid = position.board.grid
    board = position.board
    enemy = opponent(color)

    # side, rook column, squares that must be empty, squares the king touches
    for side, rook_col, between, king_path in (
        ("K", 7, (5, 6), (4, 5, 6)),
        ("Q", 0, (3, 2, 1), (4, 3, 2)),
    ):
        if not position.castling.get(color, side):
            continue
        if any(grid[row][col] is not None for col in between):
            continue
        rook = grid[row][rook_col]
        if rook is None or rook.kind != ROOK or rook.color != color or rook.has_moved:
            continue
        if any(is_attacked(board, (row, col), enemy) for col in king_path):
            continue
        out.append(Move(sq, (row, king_path[-1]), castle=side))
