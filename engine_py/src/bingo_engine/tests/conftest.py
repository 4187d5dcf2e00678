"""
Pytest fixtures for bingo engine tests.
"""

import random

import pytest

from bingo_engine.auth import BoardAccessGuard
from bingo_engine.constants import CALLING_MANUAL, FREE_CELL
from bingo_engine.engine import BingoEngine


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def card_numbers(offset: int = 0):
    """Card whose cell i holds number i + 1 + offset (free cell excepted)."""
    return [None if i == FREE_CELL else i + 1 + offset for i in range(25)]


@pytest.fixture
def make_numbers():
    return card_numbers


@pytest.fixture
def engine() -> BingoEngine:
    return BingoEngine(rng=random.Random(42))


@pytest.fixture
def manual_engine(engine) -> BingoEngine:
    """Engine in manual calling mode, so tests choose the numbers."""
    engine.set_calling_style(CALLING_MANUAL)
    return engine


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def guard(clock) -> BoardAccessGuard:
    return BoardAccessGuard(pin="1975", ttl_ms=30 * 60 * 1000, clock=clock)


@pytest.fixture
def join(manual_engine):
    """Join a card to the manual engine with the current board seed."""
    def _join(card_id=None, offset: int = 0):
        return manual_engine.join_card(str(manual_engine.state.board_seed), card_numbers(offset), card_id)
    return _join


@pytest.fixture
def cover(manual_engine):
    """Call the numbers under ``cells`` (if needed) and mark them on the card."""
    def _cover(card_id, cells, mark: bool = True):
        session = manual_engine.get_card(card_id)
        for idx in cells:
            if idx == FREE_CELL:
                continue
            number = session.numbers[idx]
            if number not in manual_engine.pool.history:
                manual_engine.call_number(number)
            if mark:
                manual_engine.mark_cell(card_id, idx, True)
    return _cover
