"""Runtime configuration for the session registry."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field, model_validator

from seabattle.engine.board import MAX_BOARD_SIZE, MIN_BOARD_SIZE
from seabattle.engine.placement import DEFAULT_MAX_ATTEMPTS


class GameConfig(BaseModel):
    """Board limits, placement budget and session eviction settings."""

    min_board_size: int = Field(default=MIN_BOARD_SIZE, ge=MIN_BOARD_SIZE, le=MAX_BOARD_SIZE)
    max_board_size: int = Field(default=MAX_BOARD_SIZE, ge=MIN_BOARD_SIZE, le=MAX_BOARD_SIZE)
    default_board_size: int = Field(default=MIN_BOARD_SIZE, ge=MIN_BOARD_SIZE, le=MAX_BOARD_SIZE)
    placement_max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, gt=0)
    finished_ttl_seconds: float = Field(default=600.0, ge=0)
    waiting_ttl_seconds: float = Field(default=1800.0, ge=0)
    reap_interval_seconds: float = Field(default=60.0, gt=0)
    rng_seed: int | None = None

    @model_validator(mode="after")
    def _check_size_range(self) -> "GameConfig":
        if self.min_board_size > self.max_board_size:
            raise ValueError("min_board_size must not exceed max_board_size")
        if not self.min_board_size <= self.default_board_size <= self.max_board_size:
            raise ValueError("default_board_size must lie within [min_board_size, max_board_size]")
        return self

    def clamp_board_size(self, requested: int | None) -> int:
        """Clamp a requested size into range; out-of-range sizes are not rejected."""
        if requested is None:
            return self.default_board_size
        return max(self.min_board_size, min(self.max_board_size, requested))

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from `SEABATTLE_*` env vars."""

        data: Dict[str, Any] = {}
        env_fields = {
            "min_board_size": "SEABATTLE_MIN_BOARD_SIZE",
            "max_board_size": "SEABATTLE_MAX_BOARD_SIZE",
            "default_board_size": "SEABATTLE_DEFAULT_BOARD_SIZE",
            "placement_max_attempts": "SEABATTLE_PLACEMENT_MAX_ATTEMPTS",
            "finished_ttl_seconds": "SEABATTLE_FINISHED_TTL_SECONDS",
            "waiting_ttl_seconds": "SEABATTLE_WAITING_TTL_SECONDS",
            "reap_interval_seconds": "SEABATTLE_REAP_INTERVAL_SECONDS",
            "rng_seed": "SEABATTLE_RNG_SEED",
        }
        for field, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                # pydantic coerces the string to the field type.
                data[field] = value.strip()
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    """Load and cache game config from the environment."""

    return GameConfig.from_env()
