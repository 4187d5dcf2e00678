"""
Draw pool: the uncalled numbers plus the ordered call history.
"""

import random
from typing import List, Optional

from .constants import BALL_COUNT, fresh_pool
from .errors import AlreadyCalledError, InvalidNumberError, NothingToUndoError, PoolEmptyError


class DrawPool:
    """Numbers 1-75 that have not been called yet, and the calls made so far."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._pool: List[int] = fresh_pool()
        self.history: List[int] = []

    @property
    def remaining(self) -> int:
        return len(self._pool)

    @property
    def current(self) -> int:
        return self.history[-1] if self.history else 0

    def reset(self):
        self._pool = fresh_pool()
        self.history = []

    def draw(self) -> int:
        """Pick one uncalled number uniformly at random."""
        if not self._pool:
            raise PoolEmptyError()
        idx = self._rng.randrange(len(self._pool))
        number = self._pool.pop(idx)
        self.history.append(number)
        return number

    def call_number(self, number) -> int:
        """Call a specific number chosen by the board operator."""
        if isinstance(number, bool) or not isinstance(number, int):
            raise InvalidNumberError()
        if number < 1 or number > BALL_COUNT:
            raise InvalidNumberError()
        if number in self.history:
            raise AlreadyCalledError()
        self._pool.remove(number)
        self.history.append(number)
        return number

    def undo(self) -> int:
        """Return the most recent call to the pool."""
        if not self.history:
            raise NothingToUndoError()
        number = self.history.pop()
        if number not in self._pool:
            self._pool.append(number)
        return number
