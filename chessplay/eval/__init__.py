"""Static evaluation.

Pure, deterministic, and side-effect free. Scores are in centipawns from
white's point of view: positive favours white, negative favours black.
"""

from __future__ import annotations

from typing import Dict, Final

from chessplay.engine.board import BISHOP, KING, KNIGHT, PAWN, QUEEN, ROOK, WHITE, Board


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
K_VAL: Final = 20000

PIECE_VALUES: Final[Dict[str, int]] = {
    PAWN: P_VAL,
    KNIGHT: N_VAL,
    BISHOP: B_VAL,
    ROOK: R_VAL,
    QUEEN: Q_VAL,
    KING: K_VAL,
}


def evaluate(board: Board) -> int:
    """Return the material balance of ``board`` (white minus black)."""
    score = 0
    for _sq, piece in board.pieces():
        value = PIECE_VALUES[piece.kind]
        score += value if piece.color == WHITE else -value
    return score
