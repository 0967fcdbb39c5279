from __future__ import annotations

import pytest

from chessplay.engine.board import BLACK, WHITE
from chessplay.engine.errors import IllegalMoveError
from chessplay.engine.game import CHECK, CHECKMATE, ONGOING, STALEMATE, Game
from chessplay.engine.move import Move, parse_uci, str_to_square
from chessplay.engine.position import STARTPOS_FEN


def _play(game: Game, *ucis: str) -> None:
    for u in ucis:
        game.commit(parse_uci(u))


def test_commit_then_undo_restores_position() -> None:
    game = Game.new()
    before = game.position.copy()
    captured = game.commit(parse_uci("e2e4"))
    assert captured is None
    assert game.side_to_move == BLACK
    assert game.undo() is True
    assert game.position == before
    assert game.to_fen() == STARTPOS_FEN
    assert game.history == []


def test_undo_restores_castling_rights_and_ep() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/4P3/R3K2R w KQkq - 0 1")
    before = game.position.copy()
    _play(game, "e2e4")
    after_push = game.position.copy()
    _play(game, "e8g8")
    assert not game.position.castling.black_king_side
    game.undo()
    assert game.position == after_push
    assert game.position.ep_square == str_to_square("e3")
    game.undo()
    assert game.position == before


def test_undo_on_empty_history_is_noop() -> None:
    game = Game.new()
    assert game.undo() is False
    assert game.to_fen() == STARTPOS_FEN


def test_illegal_move_rejected_and_not_applied() -> None:
    game = Game.new()
    with pytest.raises(IllegalMoveError):
        game.commit(parse_uci("e2e5"))
    with pytest.raises(IllegalMoveError):
        # Black piece while white is to move
        game.commit(parse_uci("e7e5"))
    assert game.to_fen() == STARTPOS_FEN
    assert game.history == []


def test_commit_resolves_flags_from_legal_list() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    game.commit(Move(str_to_square("e1"), str_to_square("g1")))
    last = game.last_move()
    assert last is not None and last.castle == "K"
    assert game.position.board.piece_at(str_to_square("f1")) is not None


def test_fools_mate_is_checkmate() -> None:
    game = Game.new()
    _play(game, "f2f3", "e7e5", "g2g4", "d8h4")
    assert game.is_terminal(WHITE) is True
    assert game.is_check(WHITE) is True
    assert game.checkmate() is True
    assert game.stalemate() is False
    assert game.status() == CHECKMATE
    assert game.winner() == BLACK
    assert game.legal_moves() == []
    assert game.position.move_number == 3


def test_stalemate_detected() -> None:
    game = Game.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert game.is_terminal() is True
    assert game.is_check() is False
    assert game.status() == STALEMATE
    assert game.winner() is None


def test_status_check_and_ongoing() -> None:
    assert Game.new().status() == ONGOING
    game = Game.from_fen("1k2q3/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert game.is_check(WHITE) is True
    assert game.status() == CHECK
    ms = {m.to_uci() for m in game.legal_moves()}
    assert "e1g1" not in ms and "e1c1" not in ms


def test_reset_returns_to_start() -> None:
    game = Game.new()
    _play(game, "e2e4", "e7e5")
    game.reset()
    assert game.to_fen() == STARTPOS_FEN
    assert game.history_uci() == []
    assert game.undo() is False


def test_history_records_moves_in_order() -> None:
    game = Game.new()
    _play(game, "e2e4", "e7e5", "g1f3")
    assert game.history_uci() == ["e2e4", "e7e5", "g1f3"]
    assert game.last_move().to_uci() == "g1f3"  # type: ignore[union-attr]
