from __future__ import annotations

from chessplay.engine.game import Game
from chessplay.engine.position import Position
from chessplay.search.service import SearchService


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def _is_same_move(a, b) -> bool:
    return a.from_sq == b.from_sq and a.to_sq == b.to_sq and a.promotion == b.promotion


def test_search_returns_legal_move_at_depth_3_startpos() -> None:
    game = Game.new()
    service = SearchService()

    res = service.search(game.position, depth=3)
    assert res.best_move is not None
    assert res.depth == 3
    assert res.nodes > 20

    legal = game.legal_moves()
    assert any(_is_same_move(res.best_move, m) for m in legal), "best move must be legal"


def test_search_returns_legal_move_at_depth_2_midgame() -> None:
    # Midgame with full castling rights and mixed pieces
    game = Game.from_fen(KIWIPETE)
    service = SearchService()

    res = service.search(game.position, depth=2)
    assert res.best_move is not None

    legal = game.legal_moves()
    assert any(_is_same_move(res.best_move, m) for m in legal), "best move must be legal"


def test_search_does_not_mutate_position() -> None:
    p = Position.from_fen(KIWIPETE)
    before = p.copy()
    SearchService().search(p, depth=2)
    assert p == before
    assert p.to_fen() == KIWIPETE


def test_search_for_black_returns_black_move() -> None:
    game = Game.new()
    game.commit(game.resolve(game.legal_moves()[0]))
    res = SearchService().search(game.position, depth=2)
    assert res.best_move is not None
    assert game.position.board.piece_at(res.best_move.from_sq).color == "b"  # type: ignore[union-attr]
