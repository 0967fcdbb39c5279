from __future__ import annotations

from .board import BISHOP, KING, KNIGHT, PAWN, QUEEN, ROOK, Board, opponent, pawn_direction
from .move import Square, inside


KNIGHT_OFFSETS = ((-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1))
KING_OFFSETS = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))
ORTHOGONAL = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL = ((-1, -1), (-1, 1), (1, -1), (1, 1))


def is_attacked(board: Board, sq: Square, by_color: str) -> bool:
    """Return True if square ``sq`` is attacked by ``by_color`` on ``board``.

    Covers: pawns, knights, king, and slider rays for bishops/rooks/queens.
    Independent of side to move and of move legality.
    """
    grid = board.grid
    r, c = sq

    # Pawn attacks: an attacking pawn sits one step behind sq in its own direction
    pr = r - pawn_direction(by_color)
    for dc in (-1, 1):
        pc = c + dc
        if inside(pr, pc):
            p = grid[pr][pc]
            if p is not None and p.kind == PAWN and p.color == by_color:
                return True

    # Knight attacks
    for dr, dc in KNIGHT_OFFSETS:
        tr, tc = r + dr, c + dc
        if inside(tr, tc):
            p = grid[tr][tc]
            if p is not None and p.kind == KNIGHT and p.color == by_color:
                return True

    # Rook-like directions
    for dr, dc in ORTHOGONAL:
        tr, tc = r + dr, c + dc
        while inside(tr, tc):
            p = grid[tr][tc]
            if p is not None:
                if p.color == by_color and p.kind in (ROOK, QUEEN):
                    return True
                break
            tr += dr
            tc += dc

    # Bishop-like directions
    for dr, dc in DIAGONAL:
        tr, tc = r + dr, c + dc
        while inside(tr, tc):
            p = grid[tr][tc]
            if p is not None:
                if p.color == by_color and p.kind in (BISHOP, QUEEN):
                    return True
                break
            tr += dr
            tc += dc

    # King adjacency
    for dr, dc in KING_OFFSETS:
        tr, tc = r + dr, c + dc
        if inside(tr, tc):
            p = grid[tr][tc]
            if p is not None and p.kind == KING and p.color == by_color:
                return True

    return False


def in_check(board: Board, color: str) -> bool:
    """Return True if ``color``'s king is attacked. A missing king is never in check."""
    ksq = board.king_square(color)
    if ksq is None:
        return False
    return is_attacked(board, ksq, opponent(color))
