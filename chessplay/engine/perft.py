from __future__ import annotations

from .apply import make_move
from .movegen import legal_moves
from .position import Position


def perft(position: Position, depth: int) -> int:
    """Compute perft node count for ``position`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Promotions are generated as queen moves only, so counts match published
    tables only for trees without promotions. ``position`` is left unchanged.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = legal_moves(position)
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        snapshot = position.copy()
        make_move(position, m)
        nodes += perft(position, depth - 1)
        position.restore(snapshot)
    return nodes
