"""WebSocket endpoint for simulation event notifications."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.controller import SimulationController

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections for the event channel."""

    def __init__(self):
        self.event_clients: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.event_clients.append(ws)
        logger.info("Event client connected (%d total)", len(self.event_clients))

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.event_clients:
            self.event_clients.remove(ws)
        logger.info("Event client disconnected (%d remaining)",
                    len(self.event_clients))

    async def broadcast(self, data: dict) -> None:
        """Broadcast a JSON message to all event clients."""
        message = json.dumps(data)
        disconnected = []
        for ws in self.event_clients:
            try:
                await ws.send_text(message)
            except Exception:
                disconnected.append(ws)
        for ws in disconnected:
            self.disconnect(ws)


def create_ws_router(controller: SimulationController) -> APIRouter:
    router = APIRouter()
    manager = ConnectionManager()

    def on_event(data: dict):
        """Runs on the server loop via call_soon_threadsafe."""
        if manager.event_clients:
            asyncio.ensure_future(manager.broadcast(data))

    controller.add_event_callback(on_event)

    @router.websocket("/ws/events")
    async def ws_events(ws: WebSocket):
        """JSON event and status notifications."""
        await manager.connect(ws)
        try:
            await ws.send_text(json.dumps({"type": "status", "stats": controller.stats}))
            while True:
                # Keep connection alive; events pushed via broadcast
                await ws.receive_text()
        except WebSocketDisconnect:
            pass
        except Exception:
            logger.exception("Events WebSocket error")
        finally:
            manager.disconnect(ws)

    return router
