from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .apply import make_move
from .attacks import in_check
from .board import Piece, opponent
from .errors import IllegalMoveError
from .move import Move, PROMOTION_PIECES
from .movegen import has_legal_moves, legal_moves
from .position import Position


logger = logging.getLogger(__name__)

ONGOING, CHECK, CHECKMATE, STALEMATE = "ongoing", "check", "checkmate", "stalemate"


@dataclass
class HistoryEntry:
    """Pre-move snapshot plus the move that was committed from it."""

    state: Position
    move: Move


@dataclass
class Game:
    """Game wrapper around a position with commit/undo bookkeeping.

    Responsibility: own the live position and its undo stack, expose legal
    moves and status queries. Nothing else mutates ``position``.
    """

    position: Position
    history: List[HistoryEntry] = field(default_factory=list)

    @classmethod
    def new(cls) -> "Game":
        return cls(position=Position.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(position=Position.from_fen(fen))

    def to_fen(self) -> str:
        return self.position.to_fen()

    @property
    def side_to_move(self) -> str:
        return self.position.side_to_move

    def legal_moves(self, color: Optional[str] = None) -> List[Move]:
        return legal_moves(self.position, color)

    def resolve(self, move: Move) -> Move:
        """Match ``move`` against the legal list by squares and promotion.

        A promoting move may name any promotion piece; generated moves carry
        a queen, which is swapped for the requested piece.

        Raises:
            IllegalMoveError: If no legal move matches.
        """
        for m in self.legal_moves():
            if not m.same_squares(move):
                continue
            if m.promotion is None and move.promotion is None:
                return m
            if m.promotion is not None:
                promo = move.promotion or m.promotion
                if promo in PROMOTION_PIECES:
                    return m.with_promotion(promo)
        raise IllegalMoveError(f"illegal move: {move.to_uci()}")

    def commit(self, move: Move) -> Optional[Piece]:
        """Apply a legal move to the live position and record it for undo.

        Returns:
            Optional[Piece]: The captured piece, if any.

        Raises:
            IllegalMoveError: If ``move`` is not legal here; nothing is applied.
        """
        resolved = self.resolve(move)
        self.history.append(HistoryEntry(state=self.position.copy(), move=resolved))
        captured = make_move(self.position, resolved)
        logger.debug(
            "commit",
            extra={"move": resolved.to_uci(), "captured": captured.kind if captured else None},
        )
        return captured

    def undo(self) -> bool:
        """Revert the most recent commit. Returns False (no-op) on empty history."""
        if not self.history:
            return False
        entry = self.history.pop()
        self.position.restore(entry.state)
        logger.debug("undo", extra={"move": entry.move.to_uci()})
        return True

    def reset(self) -> None:
        self.position = Position.startpos()
        self.history.clear()

    # --- Status queries ---
    def is_check(self, color: Optional[str] = None) -> bool:
        color = self.side_to_move if color is None else color
        return in_check(self.position.board, color)

    def is_terminal(self, color: Optional[str] = None) -> bool:
        """True when ``color`` (default: side to move) has no legal moves."""
        return not has_legal_moves(self.position, color)

    def checkmate(self) -> bool:
        return self.is_terminal() and self.is_check()

    def stalemate(self) -> bool:
        return self.is_terminal() and not self.is_check()

    def status(self) -> str:
        checked = self.is_check()
        if self.is_terminal():
            return CHECKMATE if checked else STALEMATE
        return CHECK if checked else ONGOING

    def winner(self) -> Optional[str]:
        """Colour that delivered checkmate, or None."""
        if self.checkmate():
            return opponent(self.side_to_move)
        return None

    def last_move(self) -> Optional[Move]:
        return self.history[-1].move if self.history else None

    def history_uci(self) -> List[str]:
        return [entry.move.to_uci() for entry in self.history]
