"""WebSocket endpoint for live price updates."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

from .hub import BroadcastHub, Subscription

logger = logging.getLogger(__name__)

# Close codes: dropped for falling behind, server shutting down
WS_TRY_AGAIN_LATER = 1013
WS_GOING_AWAY = 1001


def create_stream_router(hub: BroadcastHub) -> APIRouter:
    """Create the WebSocket router with a reference to the broadcast hub.

    This factory pattern lets us inject the hub without globals.
    """
    router = APIRouter(tags=["streaming"])

    @router.websocket("/ws")
    async def stream_prices(websocket: WebSocket) -> None:
        """Push-only price stream.

        The client first receives one message with the full snapshot:

            {"type": "initial_data", "data": [{"symbol": "BTCUSDT", ...}, ...]}

        then one message per applied update:

            {"type": "price_update", "data": {"symbol": "BTCUSDT", ...}}

        Anything the client sends is ignored.
        """
        await websocket.accept()
        client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
        sub = hub.subscribe()
        logger.info("WebSocket client connected: %s", client)

        # The close/error signal arrives on the receive side
        watcher = asyncio.create_task(_watch_disconnect(websocket, hub, sub), name="ws-watch")
        try:
            await _pump(websocket, sub)
            if websocket.client_state == WebSocketState.CONNECTED:
                await websocket.close(code=WS_TRY_AGAIN_LATER if sub.dropped else WS_GOING_AWAY)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.info("WebSocket send to %s failed: %s", client, e)
        finally:
            hub.unsubscribe(sub)
            watcher.cancel()
            try:
                await watcher
            except asyncio.CancelledError:
                pass
            logger.info("WebSocket client disconnected: %s", client)

    return router


async def _pump(websocket: WebSocket, sub: Subscription) -> None:
    """Forward queued messages until the subscription ends."""
    async for message in sub:
        await websocket.send_json(message)


async def _watch_disconnect(websocket: WebSocket, hub: BroadcastHub, sub: Subscription) -> None:
    """Unsubscribe as soon as the client closes the connection.

    Text and binary frames alike are read and discarded.
    """
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except (WebSocketDisconnect, RuntimeError):
        pass
    hub.unsubscribe(sub)
