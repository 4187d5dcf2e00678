"""
Board configuration.
"""

import os
from typing import List

from pydantic import BaseModel, Field, field_validator

from .constants import BOARD_AUTH_TTL_MS, DEFAULT_BOARD_PIN, MAX_PIN_LENGTH, MIN_PIN_LENGTH


class BoardConfig(BaseModel):
    """Configuration for the board process."""

    board_pin: str = Field(
        default=DEFAULT_BOARD_PIN,
        description="PIN that unlocks board controls at startup"
    )
    auth_ttl_ms: int = Field(
        default=BOARD_AUTH_TTL_MS,
        ge=1000,
        description="Lifetime of an issued board token in milliseconds"
    )
    max_cards: int = Field(
        default=32,
        ge=0,
        description="Maximum number of live card sessions (0 = unlimited)"
    )
    pattern_cycle_ms: int = Field(
        default=1500,
        ge=0,
        description="Interval for cycling the highlighted pattern (0 = disabled)"
    )
    send_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Seconds to wait for a single subscriber send"
    )
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator('board_pin')
    @classmethod
    def validate_board_pin(cls, v):
        v = str(v).strip()
        if not MIN_PIN_LENGTH <= len(v) <= MAX_PIN_LENGTH:
            raise ValueError(f'board_pin must be {MIN_PIN_LENGTH}-{MAX_PIN_LENGTH} characters')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        return str(v).upper()

    @classmethod
    def from_env(cls) -> 'BoardConfig':
        """Build a config from BINGO_* environment variables."""
        values = {}
        env_map = {
            "board_pin": "BINGO_BOARD_PIN",
            "auth_ttl_ms": "BINGO_AUTH_TTL_MS",
            "max_cards": "BINGO_MAX_CARDS",
            "pattern_cycle_ms": "BINGO_PATTERN_CYCLE_MS",
            "send_timeout": "BINGO_SEND_TIMEOUT",
            "host": "HOST",
            "port": "PORT",
            "log_level": "LOG_LEVEL",
        }
        for key, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw is not None and raw != "":
                values[key] = raw
        origins = os.getenv("BINGO_ALLOWED_ORIGINS")
        if origins:
            values["allowed_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
        return cls(**values)
