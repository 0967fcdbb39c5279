from __future__ import annotations

from fastapi.testclient import TestClient

from chessplay.engine.game import Game
from chessplay.protocol.http.app import create_app


START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def _client() -> TestClient:
    return TestClient(create_app())


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert "game_id" in body and isinstance(body["game_id"], str) and body["game_id"]
    game_id = body["game_id"]
    assert body["fen"] == START_FEN

    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["side_to_move"] == "w"
    assert state["move_number"] == 1
    assert len(state["legal_moves"]) == 20
    assert state["status"] == "ongoing"
    assert state["terminal"] is False
    assert state["winner"] is None
    assert state["last_move"] is None
    assert state["move_history"] == []


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    body = r.json()
    assert "error" in body
    assert body["error"]["code"] == "not_found"


def test_set_position_validation_and_success() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"

    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": "8/8/8 w - -"})
    assert r_bad.status_code == 400

    fen = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
    r_ok = client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    assert r_ok.status_code == 200
    state = r_ok.json()
    assert state["fen"] == fen
    assert state["stalemate"] is True
    assert state["status"] == "stalemate"
    assert state["legal_moves"] == []


def test_delete_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r = client.delete(f"/api/games/{game_id}")
    assert r.status_code == 204
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


def test_games_are_independent() -> None:
    client = _client()
    a = client.post("/api/games").json()["game_id"]
    b = client.post("/api/games").json()["game_id"]
    assert a != b
    client.post(f"/api/games/{a}/move", json={"move": "e2e4"})
    assert client.get(f"/api/games/{b}/state").json()["fen"] == START_FEN


def test_state_generates_legal_moves_once(monkeypatch) -> None:
    calls = []
    real_legal_moves = Game.legal_moves

    def counting(self, color=None):
        calls.append(color)
        return real_legal_moves(self, color)

    monkeypatch.setattr(Game, "legal_moves", counting)
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    client.post(f"/api/games/{game_id}/position", json={"fen": "7k/6Q1/6K1/8/8/8/8/8 b - - 0 1"})
    calls.clear()

    state = client.get(f"/api/games/{game_id}/state").json()
    assert len(calls) == 1
    assert state["checkmate"] is True
    assert state["winner"] == "w"
    assert state["terminal"] is True
