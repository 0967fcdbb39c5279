from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    engine_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    session_not_found_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore, SessionNotFoundError
from ...config import Settings, normalize_difficulty
from ...engine.board import opponent
from ...engine.errors import IllegalMoveError, InvalidSquareError, TerminalPositionError
from ...engine.game import CHECK, CHECKMATE, ONGOING, STALEMATE, Game
from ...engine.move import parse_uci
from ...engine.perft import perft as perft_nodes
from ...engine.position import Position
from ...search.service import MATE_SCORE, SearchService


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Coordinate move string, e.g. e2e4 or e7e8n")


class AIMoveRequest(BaseModel):
    difficulty: str = Field(default="shallow", description="random | shallow | deep")


class SearchRequest(BaseModel):
    depth: int = Field(default=1, ge=0, le=6)
    movetime_ms: Optional[int] = Field(default=None, ge=1)


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=5)


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    move_number: int
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    terminal: bool
    status: str
    winner: Optional[str]
    last_move: Optional[str]
    move_history: list[str]


class AIMoveResponse(BaseModel):
    move: str
    state: GameState


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="chessplay", version="0.1.0")

    logging.basicConfig(level=settings.log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IllegalMoveError, engine_error_handler)
    app.add_exception_handler(InvalidSquareError, engine_error_handler)
    app.add_exception_handler(TerminalPositionError, engine_error_handler)
    app.add_exception_handler(SessionNotFoundError, session_not_found_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    service = SearchService(settings)
    max_search_depth = settings.deep_depth + 1

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    # Handlers touching a game are sync: they hold the game's lock, which must
    # not block the event loop, so FastAPI runs them in its thread pool.
    @app.post("/api/games", response_model=CreateGameResponse)
    def create_game() -> CreateGameResponse:
        game = Game.new()
        game_id = store.create(game)
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        with store.locked(game_id) as game:
            return _state(game_id, game)

    @app.delete("/api/games/{game_id}", status_code=204)
    def delete_game(game_id: str) -> Response:
        # Waits for any request still working on the game
        with store.locked(game_id):
            store.delete(game_id)
        return Response(status_code=204)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        with store.locked(game_id):
            try:
                game = Game.from_fen(req.fen)
            except ValueError:
                raise HTTPException(status_code=400, detail="invalid FEN")
            store.set(game_id, game)
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with store.locked(game_id) as game:
            game.commit(move)
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    def undo(game_id: str) -> GameState:
        with store.locked(game_id) as game:
            game.undo()
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/reset", response_model=GameState)
    def reset(game_id: str) -> GameState:
        with store.locked(game_id) as game:
            game.reset()
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/ai-move", response_model=AIMoveResponse)
    def ai_move(game_id: str, req: AIMoveRequest) -> AIMoveResponse:
        try:
            difficulty = normalize_difficulty(req.difficulty)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        # Choosing and committing happen under one lock hold
        with store.locked(game_id) as game:
            move = service.choose_move(game, difficulty)
            game.commit(move)
            logger.info(
                "ai move",
                extra={"game_id": game_id, "difficulty": difficulty, "move": move.to_uci()},
            )
            return AIMoveResponse(move=move.to_uci(), state=_state(game_id, game))

    @app.post("/api/games/{game_id}/search")
    def search(game_id: str, req: SearchRequest) -> Dict[str, Any]:
        if req.depth > max_search_depth:
            raise HTTPException(status_code=400, detail=f"depth must be <= {max_search_depth}")
        movetime_ms = req.movetime_ms or settings.movetime_ms
        with store.locked(game_id) as game:
            res = service.search(game.position, depth=req.depth, movetime_ms=movetime_ms)
        # Score object: either cp or mate, from white's point of view
        score: Dict[str, Any]
        if abs(res.score) >= MATE_SCORE - 64:
            plies = MATE_SCORE - abs(res.score)
            score = {"mate": plies if res.score > 0 else -plies}
        else:
            score = {"cp": res.score}
        return {
            "best_move": res.best_move.to_uci() if res.best_move else None,
            "score": score,
            "nodes": res.nodes,
            "depth": res.depth,
            "time_ms": res.time_ms,
            "timed_out": res.timed_out,
        }

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, Any]:
        try:
            position = Position.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(position, req.depth)}

    return app


def _state(game_id: str, game: Game) -> GameState:
    # Legal moves are generated once; every status field derives from them
    legal = game.legal_moves()
    checked = game.is_check()
    if legal:
        status = CHECK if checked else ONGOING
    else:
        status = CHECKMATE if checked else STALEMATE
    last = game.last_move()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move,
        move_number=game.position.move_number,
        legal_moves=[m.to_uci() for m in legal],
        in_check=checked,
        checkmate=status == CHECKMATE,
        stalemate=status == STALEMATE,
        terminal=not legal,
        status=status,
        winner=opponent(game.side_to_move) if status == CHECKMATE else None,
        last_move=last.to_uci() if last else None,
        move_history=game.history_uci(),
    )
