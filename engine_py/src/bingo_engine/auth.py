"""
Board access control.

Board controls are unlocked with the board PIN, which yields a bearer token
valid for a fixed TTL. Only one token is live at a time.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .constants import (
    BOARD_AUTH_TTL_MS, DEFAULT_BOARD_PIN, MAX_PIN_LENGTH, MIN_PIN_LENGTH, normalize_pin,
)
from .errors import UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class BoardToken:
    token: str
    expires_at_ms: int


class BoardAccessGuard:
    def __init__(
        self,
        pin: str = DEFAULT_BOARD_PIN,
        ttl_ms: int = BOARD_AUTH_TTL_MS,
        clock: Callable[[], float] = time.time
    ):
        self._pin = normalize_pin(pin)
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._auth: Optional[BoardToken] = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _issue(self) -> Dict:
        self._auth = BoardToken(token=uuid.uuid4().hex, expires_at_ms=self._now_ms() + self.ttl_ms)
        return {"token": self._auth.token, "ttlMs": self.ttl_ms}

    def is_unlocked(self) -> bool:
        return self._auth is not None and self._auth.expires_at_ms > self._now_ms()

    def require(self, token: Optional[str]):
        """Raise UnauthorizedError unless ``token`` is the live board token."""
        if not self.is_unlocked():
            raise UnauthorizedError("board auth required")
        if not token or token != self._auth.token:
            logger.warning("Rejected board command with invalid token")
            raise UnauthorizedError("board token invalid")

    def unlock(self, pin) -> Dict:
        candidate = normalize_pin(pin)
        if not candidate or candidate != self._pin:
            logger.warning("Board unlock rejected: invalid pin")
            raise UnauthorizedError("invalid pin")
        logger.info("Board unlocked")
        return self._issue()

    def refresh(self, token: Optional[str]) -> Dict:
        self.require(token)
        return self._issue()

    def lock(self):
        self._auth = None
        logger.info("Board locked")

    def change_pin(self, token: Optional[str], current_pin, next_pin):
        self.require(token)
        if normalize_pin(current_pin) != self._pin:
            raise ValidationError("current pin invalid")
        candidate = normalize_pin(next_pin)
        if not MIN_PIN_LENGTH <= len(candidate) <= MAX_PIN_LENGTH:
            raise ValidationError("next pin invalid")
        self._pin = candidate
        logger.info("Board pin changed")
