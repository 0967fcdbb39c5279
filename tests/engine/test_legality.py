from __future__ import annotations

import random

from chessplay.engine.attacks import in_check
from chessplay.engine.board import opponent
from chessplay.engine.game import Game


def _rights(game: Game) -> tuple:
    c = game.position.castling
    return (c.white_king_side, c.white_queen_side, c.black_king_side, c.black_queen_side)


def test_random_playout_keeps_invariants() -> None:
    rng = random.Random(1234)
    game = Game.new()
    for _ in range(80):
        moves = game.legal_moves()
        if not moves:
            break
        mover = game.side_to_move
        before = game.position.copy()
        rights_before = _rights(game)

        move = rng.choice(moves)
        game.commit(move)

        # The mover never leaves its own king attacked
        assert not in_check(game.position.board, mover)
        assert game.side_to_move == opponent(mover)
        # Castling rights only ever go from True to False
        for was, now in zip(rights_before, _rights(game)):
            assert was or not now
        # An en-passant target only follows a double pawn step
        if game.position.ep_square is not None:
            assert move.double_step

        # Commit then undo is an exact round trip
        game.undo()
        assert game.position == before
        game.commit(move)

    # Unwind the whole game back to the start position
    while game.undo():
        pass
    assert game.position == Game.new().position
