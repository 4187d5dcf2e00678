"""
State serialization utilities.
"""

from typing import Any, Dict

from .models import CardSession, GameState


def serialize_state(state: GameState, card_count: int, auth_valid: bool = False) -> Dict[str, Any]:
    """
    Serialize the game state into the board snapshot sent to clients.

    Args:
        state: Current game state
        card_count: Number of live card sessions
        auth_valid: Whether a board token is currently live

    Returns:
        Snapshot dictionary safe for JSON transmission
    """
    return {
        "current": state.current,
        "called": list(state.called),
        "remaining": state.remaining,
        "boardSeed": state.board_seed,
        "gameType": state.game_type,
        "callingStyle": state.calling_style,
        "gameEstablished": state.game_established,
        "winnerDeclared": state.winner_declared,
        "manualWinnerDeclared": state.manual_winner_declared,
        "winnerCount": state.winner_count,
        "winnerEventId": state.winner_event_id,
        # One card per device, so players and cards are counted the same.
        "playerCount": card_count,
        "cardCount": card_count,
        "ledTestMode": state.led_test_mode,
        "boardAccessRequired": True,
        "boardAuthValid": auth_valid,
        "theme": state.theme,
        "brightness": state.brightness,
        "colorMode": state.color_mode,
        "staticColor": state.static_color,
        "patternIndex": state.pattern_index,
    }


def serialize_card_summary(session: CardSession, state: GameState) -> Dict[str, Any]:
    """Winner summary returned to a card after join or mark."""
    return {
        "cardId": session.card_id,
        "winner": session.winner,
        "winnerCount": state.winner_count,
        "winnerEventId": state.winner_event_id,
    }


def serialize_card_state(session: CardSession, state: GameState) -> Dict[str, Any]:
    """Card state payload; never carries the full board snapshot."""
    payload = serialize_card_summary(session, state)
    payload["marks"] = list(session.marks)
    return payload
