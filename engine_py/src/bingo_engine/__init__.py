"""
Authoritative bingo board engine with a real-time card synchronization API.
"""

from .auth import BoardAccessGuard
from .engine import BingoEngine
from .errors import (
    ConflictError, GameError, NotFoundError, UnauthorizedError, ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "BingoEngine",
    "BoardAccessGuard",
    "GameError",
    "UnauthorizedError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
]
