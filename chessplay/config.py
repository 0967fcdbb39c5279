from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field


ENV_PREFIX = "CHESSPLAY_"

RANDOM, SHALLOW, DEEP = "random", "shallow", "deep"
DIFFICULTIES = (RANDOM, SHALLOW, DEEP)
# Labels shown in the browser UI
DIFFICULTY_ALIASES: Dict[str, str] = {"easy": RANDOM, "medium": SHALLOW, "hard": DEEP}


class Settings(BaseModel):
    """Engine and server configuration.

    Every field can be overridden with an environment variable named
    ``CHESSPLAY_<FIELD>`` (e.g. ``CHESSPLAY_DEEP_DEPTH=4``).
    """

    shallow_depth: int = Field(default=2, ge=1, le=8)
    deep_depth: int = Field(default=3, ge=1, le=8)
    movetime_ms: Optional[int] = Field(default=None, ge=1)
    seed: Optional[int] = None
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``CHESSPLAY_*`` variables; pydantic validates values."""
        env = os.environ if environ is None else environ
        values: Dict[str, str] = {}
        for name in cls.model_fields:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        return cls.model_validate(values)

    def depth_for(self, difficulty: str) -> Optional[int]:
        """Search depth for ``difficulty``; None means pick a random move.

        Raises:
            ValueError: If ``difficulty`` is not recognized.
        """
        level = normalize_difficulty(difficulty)
        if level == RANDOM:
            return None
        return self.shallow_depth if level == SHALLOW else self.deep_depth


def normalize_difficulty(difficulty: str) -> str:
    level = difficulty.strip().lower()
    level = DIFFICULTY_ALIASES.get(level, level)
    if level not in DIFFICULTIES:
        raise ValueError(f"unknown difficulty: {difficulty!r}")
    return level
