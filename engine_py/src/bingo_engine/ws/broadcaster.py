"""
Event fan-out to push subscribers.

Each connection declares an interest (none, the whole board, or a single
card) and only receives the envelopes that match it. Envelopes are built
and sequenced synchronously, then queued on a per-connection outbox that a
writer task drains, so a slow connection only ever delays itself.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import orjson

from ..auth import BoardAccessGuard
from ..constants import EVENT_CARD_STATE, EVENT_SNAPSHOT, SUBSCRIBE_BOARD, SUBSCRIBE_CARD, SUBSCRIBE_NONE
from ..engine import BingoEngine
from .events import EventEnvelope, create_envelope

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    mode: str = SUBSCRIBE_NONE
    card_id: str = ""


class EventBroadcaster:
    """
    Manages push subscribers and delivers sequenced envelopes.

    Subscribers are any objects with an awaitable ``send_text(str)``, which
    is what a Starlette/FastAPI WebSocket provides. ``connect`` must be
    called from inside the running event loop.
    """

    def __init__(self, engine: BingoEngine, guard: BoardAccessGuard, send_timeout: float = 2.0):
        self.engine = engine
        self.guard = guard
        self.send_timeout = send_timeout
        self.subscriptions: Dict[Any, Subscription] = {}
        self._outboxes: Dict[Any, asyncio.Queue] = {}
        self._writers: Dict[Any, asyncio.Task] = {}
        self._sequence = 0

    @property
    def sequence_number(self) -> int:
        return self._sequence

    def connect(self, websocket: Any):
        if websocket in self.subscriptions:
            return
        outbox: asyncio.Queue = asyncio.Queue()
        self.subscriptions[websocket] = Subscription()
        self._outboxes[websocket] = outbox
        self._writers[websocket] = asyncio.create_task(self._writer(websocket, outbox))

    def disconnect(self, websocket: Any):
        self.subscriptions.pop(websocket, None)
        outbox = self._outboxes.pop(websocket, None)
        writer = self._writers.pop(websocket, None)
        if writer is not None and writer is not asyncio.current_task():
            writer.cancel()
        if outbox is not None:
            # Unsent frames are dropped along with the connection.
            while not outbox.empty():
                outbox.get_nowait()
                outbox.task_done()

    def close(self):
        for websocket in list(self.subscriptions):
            self.disconnect(websocket)

    # ---- Interest filtering ----

    def can_receive_state(self, subscription: Subscription) -> bool:
        if subscription.mode == SUBSCRIBE_BOARD:
            return True
        return (
            subscription.mode == SUBSCRIBE_CARD
            and bool(subscription.card_id)
            and self.engine.has_card(subscription.card_id)
        )

    def can_receive_card(self, subscription: Subscription, card_id: str) -> bool:
        if subscription.mode == SUBSCRIBE_BOARD:
            return True
        return (
            subscription.mode == SUBSCRIBE_CARD
            and subscription.card_id == card_id
            and self.engine.has_card(card_id)
        )

    # ---- Envelopes ----

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def state_envelope(self, event_type: str = EVENT_SNAPSHOT) -> EventEnvelope:
        payload = self.engine.snapshot(self.guard.is_unlocked())
        return create_envelope(event_type, self._next_sequence(), self.engine.state.board_seed, payload)

    def card_envelope(self, card_id: str, event_type: str = EVENT_CARD_STATE) -> Optional[EventEnvelope]:
        if not self.engine.has_card(card_id):
            return None
        payload = self.engine.card_state(card_id)
        return create_envelope(event_type, self._next_sequence(), self.engine.state.board_seed, payload)

    @staticmethod
    def encode(envelope: EventEnvelope) -> str:
        return orjson.dumps(envelope.model_dump(mode="json")).decode()

    # ---- Delivery ----

    async def _writer(self, websocket: Any, outbox: asyncio.Queue):
        """Send queued frames to one connection in order until it fails."""
        while True:
            text = await outbox.get()
            try:
                await asyncio.wait_for(websocket.send_text(text), timeout=self.send_timeout)
            except Exception as e:
                logger.error(f"Error sending to subscriber, dropping it: {e!r}")
                self.disconnect(websocket)
                return
            finally:
                outbox.task_done()

    def send(self, websocket: Any, text: str) -> bool:
        """Queue one frame for a connection; False if it is not connected."""
        outbox = self._outboxes.get(websocket)
        if outbox is None:
            return False
        outbox.put_nowait(text)
        return True

    def _deliver(self, targets: List[Any], envelope: EventEnvelope):
        text = self.encode(envelope)
        for websocket in targets:
            self.send(websocket, text)

    async def drain(self):
        """Wait until every frame queued so far has been sent or dropped."""
        await asyncio.gather(*(outbox.join() for outbox in list(self._outboxes.values())))

    def subscribe(self, websocket: Any, mode: str, card_id: str = ""):
        """
        Set a connection's interest and queue the current state for it.

        A card subscription keeps its card id even when that card is not
        joined yet; it starts receiving envelopes once the card joins.
        """
        self.connect(websocket)
        if mode not in (SUBSCRIBE_BOARD, SUBSCRIBE_CARD):
            mode = SUBSCRIBE_NONE
        if mode != SUBSCRIBE_CARD:
            card_id = ""
        subscription = Subscription(mode=mode, card_id=str(card_id or ""))
        self.subscriptions[websocket] = subscription
        logger.info(f"Subscriber set interest mode={mode} card={subscription.card_id or '-'}")

        if self.can_receive_state(subscription):
            self.send(websocket, self.encode(self.state_envelope(EVENT_SNAPSHOT)))
        if mode == SUBSCRIBE_BOARD:
            card_ids = self.engine.card_ids()
        elif self.can_receive_card(subscription, subscription.card_id):
            card_ids = [subscription.card_id]
        else:
            card_ids = []
        for active_card_id in card_ids:
            envelope = self.card_envelope(active_card_id)
            if envelope:
                self.send(websocket, self.encode(envelope))

    def publish_state(self, event_type: str = EVENT_SNAPSHOT):
        targets = [ws for ws, sub in list(self.subscriptions.items()) if self.can_receive_state(sub)]
        if not targets:
            return
        self._deliver(targets, self.state_envelope(event_type))

    def publish_card_state(self, card_id: str, event_type: str = EVENT_CARD_STATE):
        targets = [ws for ws, sub in list(self.subscriptions.items()) if self.can_receive_card(sub, card_id)]
        if not targets:
            return
        envelope = self.card_envelope(card_id, event_type)
        if envelope:
            self._deliver(targets, envelope)

    def publish_all_card_states(self, event_type: str = EVENT_CARD_STATE):
        for card_id in self.engine.card_ids():
            self.publish_card_state(card_id, event_type)
