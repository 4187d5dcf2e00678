"""Main game engine: the authoritative bingo board state"""

import logging
import random
import threading
import uuid
from typing import Any, Dict, List, Optional

from .constants import (
    BALL_COUNT, CALLING_MANUAL, CALLING_STYLES, CARD_ID_LENGTH, CELL_COUNT, COLOR_MODE_SOLID,
    COLOR_MODE_THEME, FREE_CELL, MAX_BRIGHTNESS, normalize_pin,
)
from .draw_pool import DrawPool
from .errors import (
    CapacityError, GameEstablishedError, InvalidCellError, NotFoundError,
    UnauthorizedError, ValidationError, WrongModeError,
)
from .models import CardSession, GameState
from .patterns import (
    effective_coverage, is_valid_game_type, pattern_count, satisfied_mask, unclaimed_mask,
)
from .serialization import serialize_card_state, serialize_card_summary, serialize_state

logger = logging.getLogger(__name__)


class BingoEngine:
    """
    Owns the draw pool, the card sessions and the winner bookkeeping.

    Every public operation validates first, then mutates, then recomputes
    winners, all while holding the engine lock.
    """

    def __init__(self, max_cards: int = 0, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self.max_cards = max_cards
        self.pool = DrawPool(self._rng)
        self.cards: Dict[str, CardSession] = {}
        self.state = GameState(board_seed=self._new_seed())

    def _new_seed(self, previous: Optional[int] = None) -> int:
        seed = self._rng.randint(1000, 9999)
        while seed == previous:
            seed = self._rng.randint(1000, 9999)
        return seed

    def _sync_pool(self):
        self.state.called = list(self.pool.history)
        self.state.current = self.pool.current
        self.state.remaining = self.pool.remaining

    # ---- Read side ----

    def has_card(self, card_id: str) -> bool:
        return card_id in self.cards

    def card_ids(self) -> List[str]:
        return list(self.cards.keys())

    def get_card(self, card_id: str) -> CardSession:
        session = self.cards.get(str(card_id or ""))
        if session is None:
            raise NotFoundError()
        return session

    def snapshot(self, auth_valid: bool = False) -> Dict[str, Any]:
        with self._lock:
            return serialize_state(self.state, len(self.cards), auth_valid)

    def card_state(self, card_id: str) -> Dict[str, Any]:
        with self._lock:
            return serialize_card_state(self.get_card(card_id), self.state)

    def card_summary(self, card_id: str) -> Dict[str, Any]:
        with self._lock:
            return serialize_card_summary(self.get_card(card_id), self.state)

    # ---- Winner bookkeeping ----

    def _coverage(self, session: CardSession) -> List[bool]:
        return effective_coverage(session.numbers, session.marks, self.pool.history)

    def recompute_winners(self) -> bool:
        """
        Re-evaluate every card against the current game type.

        Returns:
            True if at least one card became a winner during this pass
        """
        with self._lock:
            state = self.state
            winners = 0
            new_winner = False
            for session in self.cards.values():
                was_winner = session.winner
                claimed = session.claimed_masks.get(state.game_type, 0)
                session.winner = unclaimed_mask(state.game_type, self._coverage(session), claimed) != 0
                if session.winner:
                    winners += 1
                    if not was_winner:
                        new_winner = True

            if new_winner:
                state.winner_event_id += 1
                logger.info(f"New winner event {state.winner_event_id} ({winners} winning cards)")
            if state.winner_suppressed and winners > 0:
                # A new unclaimed pattern appeared after "keep going".
                state.winner_suppressed = False
            state.winner_count = winners
            state.winner_declared = not state.winner_suppressed and (
                winners > 0 or state.manual_winner_declared
            )
            return new_winner

    # ---- Calling numbers ----

    def _after_call(self):
        self.state.game_established = True
        self.state.winner_suppressed = False
        self._sync_pool()
        self.recompute_winners()

    def draw(self) -> int:
        with self._lock:
            if self.state.calling_style == CALLING_MANUAL:
                raise WrongModeError("manual mode")
            number = self.pool.draw()
            self._after_call()
            logger.info(f"Drew {number} ({self.state.remaining} remaining)")
            return number

    def call_number(self, number) -> int:
        with self._lock:
            if self.state.calling_style != CALLING_MANUAL:
                raise WrongModeError("not manual")
            self.pool.call_number(number)
            self._after_call()
            logger.info(f"Called {number} ({self.state.remaining} remaining)")
            return number

    def undo(self) -> int:
        with self._lock:
            number = self.pool.undo()
            # The round changed retroactively, so a manual call no longer stands.
            self.state.manual_winner_declared = False
            self.state.winner_declared = False
            self._after_call()
            logger.info(f"Undid {number}")
            return number

    def reset(self):
        with self._lock:
            state = self.state
            self.pool.reset()
            self._sync_pool()
            state.game_established = False
            state.manual_winner_declared = False
            state.winner_suppressed = False
            state.winner_declared = False
            state.winner_event_id = 0
            state.winner_count = 0
            state.board_seed = self._new_seed(state.board_seed)
            for session in self.cards.values():
                session.clear_play()
            self.recompute_winners()
            logger.info(f"Game reset, new board seed {state.board_seed}")

    # ---- Game setup ----

    def set_calling_style(self, calling_style: str):
        with self._lock:
            if self.state.game_established:
                raise GameEstablishedError()
            if calling_style not in CALLING_STYLES:
                raise ValidationError("invalid calling style")
            self.state.calling_style = calling_style

    def set_game_type(self, game_type: str):
        with self._lock:
            if not is_valid_game_type(game_type):
                raise ValidationError("invalid game type")
            self.state.game_type = game_type
            self.state.pattern_index = 0
            self.recompute_winners()

    def advance_pattern_index(self) -> bool:
        """Step the highlighted pattern for game types with several patterns."""
        with self._lock:
            count = pattern_count(self.state.game_type)
            if count <= 1:
                return False
            self.state.pattern_index = (self.state.pattern_index + 1) % count
            return True

    # ---- Manual winner overrides ----

    def declare_winner(self):
        with self._lock:
            self.state.winner_suppressed = False
            self.state.manual_winner_declared = True
            self.state.winner_event_id += 1
            self.recompute_winners()
            logger.info(f"Winner declared manually (event {self.state.winner_event_id})")

    def clear_winner(self):
        """Keep going: claim every currently satisfied pattern and suppress."""
        with self._lock:
            game_type = self.state.game_type
            self.state.manual_winner_declared = False
            self.state.winner_suppressed = True
            for session in self.cards.values():
                claimed = session.claimed_masks.get(game_type, 0)
                session.claimed_masks[game_type] = claimed | satisfied_mask(game_type, self._coverage(session))
            self.recompute_winners()
            logger.info("Winner cleared, play continues")

    # ---- Display settings ----

    def set_led_test(self, enabled: bool):
        with self._lock:
            self.state.led_test_mode = bool(enabled)

    def set_brightness(self, value: Optional[float]):
        with self._lock:
            if value is None:
                return
            self.state.brightness = max(0, min(MAX_BRIGHTNESS, int(round(value))))

    def set_theme(self, theme: Optional[int]):
        with self._lock:
            self.state.theme = int(theme or 0)
            self.state.color_mode = COLOR_MODE_THEME

    def set_color(self, hex_color: Optional[str]):
        with self._lock:
            value = str(hex_color or "").replace("#", "")
            if len(value) < 6:
                return
            value = value[:6]
            try:
                int(value, 16)
            except ValueError:
                raise ValidationError("invalid color")
            self.state.static_color = f"#{value.upper()}"
            self.state.color_mode = COLOR_MODE_SOLID

    # ---- Card sessions ----

    def _normalize_numbers(self, numbers) -> List[Optional[int]]:
        if not isinstance(numbers, (list, tuple)) or len(numbers) != CELL_COUNT:
            raise ValidationError("numbers[25] required")
        normalized = []
        for idx, value in enumerate(numbers):
            if idx == FREE_CELL or value is None:
                normalized.append(None)
                continue
            if isinstance(value, bool):
                raise ValidationError("invalid card numbers")
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ValidationError("invalid card numbers")
            if not number.is_integer() or not 1 <= number <= BALL_COUNT:
                raise ValidationError("invalid card numbers")
            if int(number) in normalized:
                raise ValidationError("duplicate card numbers")
            normalized.append(int(number))
        return normalized

    def join_card(self, pin, numbers, card_id: Optional[str] = None) -> CardSession:
        """
        Create or replace a card session.

        Args:
            pin: Join code, must equal the current board seed
            numbers: 25 card numbers in row-major order
            card_id: Existing card id to rejoin with, or None for a new one

        Returns:
            The joined card session
        """
        with self._lock:
            if normalize_pin(pin) != str(self.state.board_seed):
                raise UnauthorizedError("invalid board seed")
            normalized = self._normalize_numbers(numbers)
            card_id = str(card_id or "").strip() or uuid.uuid4().hex[:CARD_ID_LENGTH]
            if card_id not in self.cards and self.max_cards and len(self.cards) >= self.max_cards:
                raise CapacityError()

            session = self.cards.get(card_id) or CardSession(card_id=card_id)
            session.numbers = normalized
            session.clear_play()
            self.cards[card_id] = session

            self.state.winner_suppressed = False
            self.recompute_winners()
            logger.info(f"Card {card_id} joined ({len(self.cards)} cards)")
            return session

    def mark_cell(self, card_id: str, cell_index, marked: bool) -> CardSession:
        with self._lock:
            session = self.get_card(card_id)
            if isinstance(cell_index, bool) or not isinstance(cell_index, int):
                raise InvalidCellError()
            if cell_index < 0 or cell_index >= CELL_COUNT or cell_index == FREE_CELL:
                raise InvalidCellError()
            session.marks[cell_index] = bool(marked)
            self.recompute_winners()
            return session

    def leave_card(self, card_id: str):
        with self._lock:
            session = self.get_card(card_id)
            del self.cards[session.card_id]
            self.recompute_winners()
            logger.info(f"Card {session.card_id} left ({len(self.cards)} cards)")
