from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

from chessplay.config import Settings
from chessplay.engine.apply import make_move
from chessplay.engine.attacks import in_check
from chessplay.engine.board import WHITE
from chessplay.engine.errors import TerminalPositionError
from chessplay.engine.game import Game
from chessplay.engine.move import Move
from chessplay.engine.movegen import legal_moves
from chessplay.engine.position import Position
from chessplay.eval import evaluate


logger = logging.getLogger(__name__)

INF = 10_000_000
MATE_SCORE = 1_000_000  # mate scores are within +/- MATE_SCORE of zero


@dataclass(frozen=True)
class SearchResult:
    """Score and best move of a (sub)tree.

    ``nodes``, ``depth``, ``time_ms`` and ``timed_out`` are only filled in on
    the result returned from the root.
    """

    score: int
    best_move: Optional[Move]
    nodes: int = 0
    depth: int = 0
    time_ms: int = 0
    timed_out: bool = False


class SearchService:
    """Minimax search with alpha-beta pruning and move selection by difficulty."""

    def __init__(self, settings: Optional[Settings] = None, rng: Optional[random.Random] = None):
        self.settings = settings or Settings()
        self.rng = rng or random.Random(self.settings.seed)

    def search(
        self,
        position: Position,
        depth: int = 1,
        alpha: int = -INF,
        beta: int = INF,
        maximizing: Optional[bool] = None,
        movetime_ms: Optional[int] = None,
    ) -> SearchResult:
        """Search ``position`` to ``depth`` plies and return the best line's head.

        Scores are material from white's point of view, so white maximizes.
        ``maximizing`` defaults to "white to move". The given position is
        never mutated: all work happens on a private copy that is rolled back
        after every branch.

        Args:
            position (Position): Position to search from.
            depth (int): Remaining plies; ``0`` returns the static evaluation.
            alpha (int): Lower bound of the search window.
            beta (int): Upper bound of the search window.
            maximizing (Optional[bool]): Whether the side to move maximizes.
            movetime_ms (Optional[int]): Optional deadline; when it passes,
                nodes fall back to static evaluation and the best move found
                so far is returned.

        Returns:
            SearchResult: Score, best move (None at terminal nodes and at
                depth 0) and root statistics.
        """
        if depth < 0:
            raise ValueError("depth must be >= 0")
        if maximizing is None:
            maximizing = position.side_to_move == WHITE
        work = position.copy()
        nodes = 0
        start = time.perf_counter()
        time_up = False

        def out_of_time() -> bool:
            nonlocal time_up
            if movetime_ms is None or time_up:
                return time_up
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            if elapsed_ms >= movetime_ms:
                time_up = True
            return time_up

        def minimax(d: int, alpha: int, beta: int, maximizing: bool, ply: int) -> SearchResult:
            nonlocal nodes
            nodes += 1

            if d == 0 or (ply > 0 and out_of_time()):
                return SearchResult(evaluate(work.board), None)

            legal = legal_moves(work)
            if not legal:
                if in_check(work.board, work.side_to_move):
                    # Side to move is mated; nearer mates score higher for the winner
                    mate = MATE_SCORE - ply
                    return SearchResult(-mate if maximizing else mate, None)
                return SearchResult(0, None)

            best_move: Optional[Move] = None
            best_score = -INF if maximizing else INF
            for m in legal:
                if best_move is not None and out_of_time():
                    break
                snapshot = work.copy()
                make_move(work, m)
                child = minimax(d - 1, alpha, beta, not maximizing, ply + 1)
                work.restore(snapshot)

                if maximizing:
                    if child.score > best_score:
                        best_score, best_move = child.score, m
                    alpha = max(alpha, child.score)
                else:
                    if child.score < best_score:
                        best_score, best_move = child.score, m
                    beta = min(beta, child.score)
                if beta <= alpha:
                    break
            return SearchResult(best_score, best_move)

        root = minimax(depth, alpha, beta, maximizing, 0)
        time_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "search",
            extra={
                "depth": depth,
                "nodes": nodes,
                "score": root.score,
                "best_move": root.best_move.to_uci() if root.best_move else None,
                "time_ms": time_ms,
                "timed_out": time_up,
            },
        )
        return SearchResult(
            score=root.score,
            best_move=root.best_move,
            nodes=nodes,
            depth=depth,
            time_ms=time_ms,
            timed_out=time_up,
        )

    def choose_move(self, game: Game, difficulty: str) -> Move:
        """Select a move for the automated side to move.

        ``random`` picks uniformly among legal moves; ``shallow`` and ``deep``
        run the minimax search at the configured depths. If the search yields
        no move, a uniformly random legal move is returned instead.

        Raises:
            TerminalPositionError: If the side to move has no legal moves.
            ValueError: If ``difficulty`` is unknown.
        """
        depth = self.settings.depth_for(difficulty)
        legal = game.legal_moves()
        if not legal:
            raise TerminalPositionError("no legal moves: game is over")
        if depth is None:
            return self.rng.choice(legal)
        result = self.search(game.position, depth=depth, movetime_ms=self.settings.movetime_ms)
        if result.best_move is None:
            logger.warning("search returned no move; falling back to a random legal move")
            return self.rng.choice(legal)
        return result.best_move
