"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .constants import (
    CALLING_AUTOMATIC, COLOR_MODE_THEME, DEFAULT_BRIGHTNESS, DEFAULT_STATIC_COLOR,
    GAME_TRADITIONAL, GAME_TYPES, fresh_marks,
)


def empty_claims() -> Dict[str, int]:
    return {game_type: 0 for game_type in GAME_TYPES}


@dataclass
class CardSession:
    card_id: str
    numbers: List[Optional[int]] = field(default_factory=list)  # 25 cells, row-major
    marks: List[bool] = field(default_factory=fresh_marks)
    claimed_masks: Dict[str, int] = field(default_factory=empty_claims)
    winner: bool = False

    def clear_play(self):
        """Forget marks and claims, keep the card's numbers."""
        self.marks = fresh_marks()
        self.claimed_masks = empty_claims()
        self.winner = False


@dataclass
class GameState:
    board_seed: int
    current: int = 0
    called: List[int] = field(default_factory=list)
    remaining: int = 75
    game_type: str = GAME_TRADITIONAL
    calling_style: str = CALLING_AUTOMATIC
    game_established: bool = False
    # Winner bookkeeping
    winner_declared: bool = False
    manual_winner_declared: bool = False
    winner_suppressed: bool = False
    winner_count: int = 0
    winner_event_id: int = 0
    # Display pass-through settings
    led_test_mode: bool = False
    theme: int = 0
    brightness: int = DEFAULT_BRIGHTNESS
    color_mode: str = COLOR_MODE_THEME
    static_color: str = DEFAULT_STATIC_COLOR
    pattern_index: int = 0
