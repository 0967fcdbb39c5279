from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from ...engine.game import Game


class SessionNotFoundError(LookupError):
    """No game is registered under the requested id."""


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    ``_lock`` guards the mappings. Each game also has its own lock, taken
    through ``locked()``, so a game is only read or mutated by one request
    handler at a time.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}
        self._game_locks: Dict[str, threading.Lock] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Register ``game`` (default: a new game) and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._games[gid] = game
            self._game_locks[gid] = threading.Lock()
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    @contextmanager
    def locked(self, game_id: str) -> Iterator[Game]:
        """Hold the game's lock for the duration of the block and yield the game.

        The game is looked up after the lock is acquired, so a replacement
        made through ``set`` or a concurrent ``delete`` is observed.

        Raises:
            SessionNotFoundError: If ``game_id`` is unknown or was deleted
                while waiting for the lock.
        """
        with self._lock:
            game_lock = self._game_locks.get(game_id)
        if game_lock is None:
            raise SessionNotFoundError(game_id)
        with game_lock:
            game = self.get(game_id)
            if game is None:
                raise SessionNotFoundError(game_id)
            yield game

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise SessionNotFoundError(game_id)
            self._games[game_id] = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            self._game_locks.pop(game_id, None)
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
