"""
WebSocket endpoint handling for the board push channel.
"""

import logging

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from ..gateway import CommandGateway
from .events import CommandMessage, SubscribeMessage, parse_inbound_message

logger = logging.getLogger(__name__)


async def handle_socket(websocket: WebSocket, gateway: CommandGateway):
    """
    Serve one push connection until it closes.

    Frames that are not valid JSON, or not a known message type, are ignored
    so that one corrupt frame does not tear down the connection.
    """
    broadcaster = gateway.broadcaster
    await websocket.accept()
    broadcaster.connect(websocket)
    logger.info(f"WebSocket connection accepted ({len(broadcaster.subscriptions)} open)")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text") or frame.get("bytes")
            if not raw:
                continue

            try:
                data = orjson.loads(raw)
            except orjson.JSONDecodeError:
                continue
            message = parse_inbound_message(data)

            if isinstance(message, SubscribeMessage):
                await gateway.subscribe(websocket, message.normalized_mode, message.cardId)
            elif isinstance(message, CommandMessage):
                result = await gateway.handle_command(message)
                broadcaster.send(websocket, orjson.dumps(result.to_wire()).decode())

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {e!r}")
    finally:
        broadcaster.disconnect(websocket)
        logger.info(f"WebSocket disconnected ({len(broadcaster.subscriptions)} open)")
