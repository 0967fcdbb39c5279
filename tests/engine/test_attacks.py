from __future__ import annotations

from chessplay.engine.attacks import in_check, is_attacked
from chessplay.engine.board import BLACK, WHITE
from chessplay.engine.move import str_to_square
from chessplay.engine.position import Position


def _attacked(fen: str, sq: str, by: str) -> bool:
    return is_attacked(Position.from_fen(fen).board, str_to_square(sq), by)


def test_pawn_attacks_follow_color_direction() -> None:
    fen = "4k3/8/8/8/3p4/8/3P4/4K3 w - - 0 1"
    # White pawn d2 attacks c3/e3, never backwards
    assert _attacked(fen, "c3", WHITE)
    assert _attacked(fen, "e3", WHITE)
    assert not _attacked(fen, "d3", WHITE)
    assert not _attacked(fen, "c1", WHITE)
    # Black pawn d4 attacks c3/e3 downwards
    assert _attacked(fen, "e3", BLACK)
    assert not _attacked(fen, "e5", BLACK)


def test_knight_attacks() -> None:
    fen = "4k3/8/8/8/8/8/8/1N2K3 w - - 0 1"
    for sq in ("a3", "c3", "d2"):
        assert _attacked(fen, sq, WHITE)
    assert not _attacked(fen, "b3", WHITE)


def test_sliders_stop_at_first_blocker() -> None:
    fen = "4k3/8/8/8/R2p3r/8/8/B3K3 w - - 0 1"
    # Rook a4 sees b4..d4 but not e4 (blocked by d4)
    assert _attacked(fen, "c4", WHITE)
    assert _attacked(fen, "d4", WHITE)
    assert not _attacked(fen, "f4", WHITE)
    # Black rook h4 sees back along the rank up to d4
    assert _attacked(fen, "e4", BLACK)
    # Bishop a1 sees c3 but the pawn on d4 shields e5
    assert _attacked(fen, "c3", WHITE)
    assert not _attacked(fen, "e5", WHITE)


def test_king_adjacency_counts_as_attack() -> None:
    fen = "4k3/8/8/8/8/8/8/4K3 w - - 0 1"
    assert _attacked(fen, "d2", WHITE)
    assert _attacked(fen, "f7", BLACK)
    assert not _attacked(fen, "e3", WHITE)


def test_attack_ignores_side_to_move() -> None:
    w = "4k3/8/8/8/8/8/8/Q3K3 w - - 0 1"
    b = "4k3/8/8/8/8/8/8/Q3K3 b - - 0 1"
    assert _attacked(w, "a8", WHITE) == _attacked(b, "a8", WHITE) is True


def test_king_on_e1_against_queen_on_e8_is_check() -> None:
    p = Position.from_fen("1k2q3/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert in_check(p.board, WHITE)
    assert not in_check(p.board, BLACK)
