"""FastAPI main application for the bingo board backend"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import BoardAccessGuard
from .config import BoardConfig
from .engine import BingoEngine
from .errors import GameError, InternalError
from .gateway import CommandGateway
from .ws.broadcaster import EventBroadcaster
from .ws.server import handle_socket

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-board-token"


async def _read_payload(request: Request) -> Dict[str, Any]:
    """Request body as a dict; an empty or unparseable body counts as {}."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def create_app(
    config: Optional[BoardConfig] = None,
    engine: Optional[BingoEngine] = None,
    guard: Optional[BoardAccessGuard] = None
) -> FastAPI:
    """
    Build the board application.

    Args:
        config: Board configuration (read from the environment if omitted)
        engine: Game engine to serve (a fresh one if omitted)
        guard: Board access guard (built from config if omitted)

    Returns:
        FastAPI application serving HTTP commands and the /ws push channel
    """
    config = config or BoardConfig.from_env()
    engine = engine or BingoEngine(max_cards=config.max_cards)
    guard = guard or BoardAccessGuard(pin=config.board_pin, ttl_ms=config.auth_ttl_ms)
    broadcaster = EventBroadcaster(engine, guard, send_timeout=config.send_timeout)
    gateway = CommandGateway(engine, guard, broadcaster)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cycle_task = None
        if config.pattern_cycle_ms > 0:
            cycle_task = asyncio.create_task(gateway.run_pattern_cycle(config.pattern_cycle_ms))
        logger.info(f"Board ready, current board seed {engine.state.board_seed}")
        try:
            yield
        finally:
            if cycle_task:
                cycle_task.cancel()
                with suppress(asyncio.CancelledError):
                    await cycle_task
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(broadcaster.drain(), timeout=config.send_timeout)
            broadcaster.close()

    app = FastAPI(title="Bingo Board API", version="1.0.0", lifespan=lifespan)
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError):
        return JSONResponse(status_code=exc.status, content={"error": exc.message, "code": exc.code})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return await game_error_handler(request, InternalError())

    async def dispatch(request: Request, action: str, payload: Optional[Dict[str, Any]] = None):
        if payload is None:
            payload = await _read_payload(request)
        return await gateway.execute(action, request.headers.get(TOKEN_HEADER), payload)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "cards": len(engine.cards),
            "connections": len(broadcaster.subscriptions)
        }

    @app.get("/api/state")
    async def get_state(request: Request):
        return await dispatch(request, "get_state", {})

    # Board access
    @app.post("/auth/board/unlock")
    async def unlock(request: Request):
        return await dispatch(request, "unlock")

    @app.post("/auth/board/lock")
    async def lock(request: Request):
        return await dispatch(request, "lock", {})

    @app.post("/auth/board/refresh")
    async def refresh(request: Request):
        return await dispatch(request, "refresh", {})

    @app.post("/board/pin")
    async def change_pin(request: Request):
        return await dispatch(request, "change_pin")

    # Calling numbers
    @app.post("/draw")
    async def draw(request: Request):
        return await dispatch(request, "draw", {})

    @app.post("/call")
    async def call_number(request: Request):
        return await dispatch(request, "call_number")

    @app.post("/undo")
    async def undo(request: Request):
        return await dispatch(request, "undo", {})

    @app.post("/reset")
    async def reset(request: Request):
        return await dispatch(request, "reset", {})

    @app.post("/calling-style")
    async def set_calling_style(request: Request):
        return await dispatch(request, "set_calling_style")

    @app.post("/game-type")
    async def set_game_type(request: Request):
        return await dispatch(request, "set_game_type")

    # Winner overrides
    @app.post("/declare-winner")
    async def declare_winner(request: Request):
        return await dispatch(request, "declare_winner", {})

    @app.post("/clear-winner")
    async def clear_winner(request: Request):
        return await dispatch(request, "clear_winner", {})

    # Display settings
    @app.post("/led-test")
    async def led_test(request: Request):
        return await dispatch(request, "led_test")

    @app.post("/brightness")
    async def set_brightness(request: Request):
        payload = await _read_payload(request)
        if "value" not in payload and "value" in request.query_params:
            payload["value"] = request.query_params["value"]
        return await dispatch(request, "set_brightness", payload)

    @app.post("/theme")
    async def set_theme(request: Request):
        return await dispatch(request, "set_theme")

    @app.post("/color")
    async def set_color(request: Request):
        return await dispatch(request, "set_color")

    # Cards
    @app.post("/card/join")
    async def join_card(request: Request):
        return await dispatch(request, "join_card")

    @app.post("/card/mark")
    async def mark_card_cell(request: Request):
        return await dispatch(request, "mark_card_cell")

    @app.post("/card/leave")
    async def leave_card(request: Request):
        return await dispatch(request, "leave_card")

    @app.get("/api/card-state")
    async def get_card_state(request: Request, cardId: str = ""):
        return await dispatch(request, "get_card_state", {"cardId": cardId})

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await handle_socket(websocket, gateway)

    return app


_config = BoardConfig.from_env()

# Configure logging
logging.basicConfig(level=_config.log_level)

app = create_app(_config)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
