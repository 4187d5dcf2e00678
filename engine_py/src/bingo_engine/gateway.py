"""
Command gateway: the single dispatch point shared by HTTP and WebSocket.

Both transports hand an ``(action, token, payload)`` triple to
``CommandGateway.execute``. The command runs under one asyncio lock from the
authorization check through the broadcast, so no client ever observes a
half-applied command.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .auth import BoardAccessGuard
from .constants import (
    EVENT_BOARD_AUTH_CHANGED, EVENT_BOARD_PIN_CHANGED, EVENT_BRIGHTNESS_CHANGED,
    EVENT_CALLING_STYLE_CHANGED, EVENT_CARD_JOINED, EVENT_CARD_LEFT, EVENT_CARD_MARK_CHANGED,
    EVENT_COLOR_CHANGED, EVENT_GAME_RESET, EVENT_GAME_TYPE_CHANGED, EVENT_LED_TEST_CHANGED,
    EVENT_NUMBER_CALLED, EVENT_NUMBER_UNDONE, EVENT_PATTERN_INDEX_CHANGED, EVENT_THEME_CHANGED,
    EVENT_WINNER_CHANGED,
)
from .engine import BingoEngine
from .errors import GameError, InternalError, ValidationError
from .ws.broadcaster import EventBroadcaster
from .ws.events import (
    BrightnessPayload, CallNumberPayload, CallingStylePayload, CardRefPayload, ChangePinPayload,
    ColorPayload, CommandMessage, CommandResult, GameTypePayload, JoinCardPayload, LedTestPayload,
    MarkCellPayload, ThemePayload, UnlockPayload, create_command_error, create_command_result,
    parse_payload,
)

logger = logging.getLogger(__name__)

# Which card envelopes follow a command
CARDS_ALL = "all"
CARDS_ONE = "one"

Handler = Callable[["CommandGateway", Optional[str], Dict[str, Any]], Optional[Dict[str, Any]]]


@dataclass(frozen=True)
class Command:
    handler: Handler
    privileged: bool = False
    state_event: Optional[str] = None
    card_scope: Optional[str] = None


class CommandGateway:
    def __init__(self, engine: BingoEngine, guard: BoardAccessGuard, broadcaster: EventBroadcaster):
        self.engine = engine
        self.guard = guard
        self.broadcaster = broadcaster
        self._lock = asyncio.Lock()

    def snapshot(self) -> Dict[str, Any]:
        return self.engine.snapshot(self.guard.is_unlocked())

    async def execute(self, action: str, token: Optional[str] = None, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one command to completion.

        Args:
            action: Command name (see COMMANDS)
            token: Board token for privileged commands
            payload: Command arguments

        Returns:
            Response data for the caller

        Raises:
            GameError: If the command is unknown, unauthorized or rejected
        """
        command = COMMANDS.get(action)
        if command is None:
            raise ValidationError("unknown action")

        async with self._lock:
            if command.privileged:
                self.guard.require(token)
            data = command.handler(self, token, payload or {})

            if command.state_event:
                self.broadcaster.publish_state(command.state_event)
            if command.card_scope == CARDS_ALL:
                self.broadcaster.publish_all_card_states()
            elif command.card_scope == CARDS_ONE and data:
                self.broadcaster.publish_card_state(data["cardId"])
            return data if data is not None else {}

    async def handle_command(self, message: CommandMessage) -> CommandResult:
        """Execute a push-channel command and wrap the outcome for the reply."""
        try:
            data = await self.execute(message.action, message.token, message.payload)
        except GameError as e:
            return create_command_error(message.requestId, e.status, e.message)
        except Exception:
            logger.exception(f"Unhandled error in command {message.action!r}")
            error = InternalError()
            return create_command_error(message.requestId, error.status, error.message)
        return create_command_result(message.requestId, data)

    async def subscribe(self, websocket: Any, mode: str, card_id: str = ""):
        async with self._lock:
            self.broadcaster.subscribe(websocket, mode, card_id)

    async def cycle_pattern(self) -> bool:
        async with self._lock:
            if not self.engine.advance_pattern_index():
                return False
            self.broadcaster.publish_state(EVENT_PATTERN_INDEX_CHANGED)
            return True

    async def run_pattern_cycle(self, interval_ms: int):
        """Advance the highlighted pattern forever; cancelled on shutdown."""
        while True:
            await asyncio.sleep(interval_ms / 1000)
            try:
                await self.cycle_pattern()
            except Exception:
                logger.exception("Pattern cycle step failed")


# ---- Handlers ----

def _get_state(gateway: CommandGateway, token, payload):
    return gateway.snapshot()


def _unlock(gateway: CommandGateway, token, payload):
    request = parse_payload(UnlockPayload, payload)
    return gateway.guard.unlock(request.pin)


def _lock(gateway: CommandGateway, token, payload):
    gateway.guard.lock()
    return {}


def _refresh(gateway: CommandGateway, token, payload):
    return gateway.guard.refresh(token)


def _change_pin(gateway: CommandGateway, token, payload):
    request = parse_payload(ChangePinPayload, payload)
    gateway.guard.change_pin(token, request.currentPin, request.nextPin)
    return {}


def _draw(gateway: CommandGateway, token, payload):
    gateway.engine.draw()
    return gateway.snapshot()


def _reset(gateway: CommandGateway, token, payload):
    gateway.engine.reset()
    return {}


def _undo(gateway: CommandGateway, token, payload):
    gateway.engine.undo()
    return gateway.snapshot()


def _set_calling_style(gateway: CommandGateway, token, payload):
    request = parse_payload(CallingStylePayload, payload)
    gateway.engine.set_calling_style(request.callingStyle)
    return {}


def _call_number(gateway: CommandGateway, token, payload):
    request = parse_payload(CallNumberPayload, payload, "invalid number")
    gateway.engine.call_number(request.number)
    return gateway.snapshot()


def _set_game_type(gateway: CommandGateway, token, payload):
    request = parse_payload(GameTypePayload, payload)
    gateway.engine.set_game_type(request.gameType)
    return {}


def _declare_winner(gateway: CommandGateway, token, payload):
    gateway.engine.declare_winner()
    return {}


def _clear_winner(gateway: CommandGateway, token, payload):
    gateway.engine.clear_winner()
    return {}


def _led_test(gateway: CommandGateway, token, payload):
    request = parse_payload(LedTestPayload, payload, "enabled required")
    gateway.engine.set_led_test(request.enabled)
    return gateway.snapshot()


def _set_brightness(gateway: CommandGateway, token, payload):
    request = parse_payload(BrightnessPayload, payload)
    gateway.engine.set_brightness(request.value)
    return {}


def _set_theme(gateway: CommandGateway, token, payload):
    request = parse_payload(ThemePayload, payload, "invalid theme")
    gateway.engine.set_theme(request.resolved)
    return {}


def _set_color(gateway: CommandGateway, token, payload):
    request = parse_payload(ColorPayload, payload, "invalid color")
    gateway.engine.set_color(request.resolved)
    return {}


def _join_card(gateway: CommandGateway, token, payload):
    request = parse_payload(JoinCardPayload, payload)
    session = gateway.engine.join_card(request.pin, request.numbers, request.cardId)
    return gateway.engine.card_summary(session.card_id)


def _mark_card_cell(gateway: CommandGateway, token, payload):
    request = parse_payload(MarkCellPayload, payload, "invalid cell")
    session = gateway.engine.mark_cell(request.cardId, request.cellIndex, request.marked)
    return gateway.engine.card_summary(session.card_id)


def _leave_card(gateway: CommandGateway, token, payload):
    request = parse_payload(CardRefPayload, payload)
    gateway.engine.leave_card(request.cardId)
    return {}


def _get_card_state(gateway: CommandGateway, token, payload):
    request = parse_payload(CardRefPayload, payload)
    return gateway.engine.card_state(request.cardId)


COMMANDS: Dict[str, Command] = {
    "get_state": Command(_get_state),
    "unlock": Command(_unlock, state_event=EVENT_BOARD_AUTH_CHANGED),
    "lock": Command(_lock, state_event=EVENT_BOARD_AUTH_CHANGED),
    "refresh": Command(_refresh, privileged=True, state_event=EVENT_BOARD_AUTH_CHANGED),
    "change_pin": Command(_change_pin, privileged=True, state_event=EVENT_BOARD_PIN_CHANGED),
    "draw": Command(_draw, privileged=True, state_event=EVENT_NUMBER_CALLED, card_scope=CARDS_ALL),
    "reset": Command(_reset, privileged=True, state_event=EVENT_GAME_RESET, card_scope=CARDS_ALL),
    "undo": Command(_undo, privileged=True, state_event=EVENT_NUMBER_UNDONE, card_scope=CARDS_ALL),
    "set_calling_style": Command(_set_calling_style, privileged=True, state_event=EVENT_CALLING_STYLE_CHANGED),
    "call_number": Command(_call_number, privileged=True, state_event=EVENT_NUMBER_CALLED, card_scope=CARDS_ALL),
    "set_game_type": Command(_set_game_type, privileged=True, state_event=EVENT_GAME_TYPE_CHANGED, card_scope=CARDS_ALL),
    "declare_winner": Command(_declare_winner, privileged=True, state_event=EVENT_WINNER_CHANGED, card_scope=CARDS_ALL),
    "clear_winner": Command(_clear_winner, privileged=True, state_event=EVENT_WINNER_CHANGED, card_scope=CARDS_ALL),
    "led_test": Command(_led_test, privileged=True, state_event=EVENT_LED_TEST_CHANGED),
    "set_brightness": Command(_set_brightness, privileged=True, state_event=EVENT_BRIGHTNESS_CHANGED),
    "set_theme": Command(_set_theme, privileged=True, state_event=EVENT_THEME_CHANGED),
    "set_color": Command(_set_color, privileged=True, state_event=EVENT_COLOR_CHANGED),
    "join_card": Command(_join_card, state_event=EVENT_CARD_JOINED, card_scope=CARDS_ONE),
    "mark_card_cell": Command(_mark_card_cell, state_event=EVENT_CARD_MARK_CHANGED, card_scope=CARDS_ONE),
    "leave_card": Command(_leave_card, state_event=EVENT_CARD_LEFT, card_scope=CARDS_ALL),
    "get_card_state": Command(_get_card_state),
}
