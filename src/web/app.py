"""FastAPI application factory."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.controller import SimulationController
from src.web.routes import create_router
from src.web.websocket import create_ws_router


def create_app(controller: SimulationController, autostart: bool = False) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Timer-thread callbacks are marshalled onto the server loop
        controller.set_event_loop(asyncio.get_running_loop())
        if autostart:
            controller.start()
        yield
        controller.shutdown()

    app = FastAPI(title="Maritime Anomaly Simulation", version="0.1.0",
                  lifespan=lifespan)

    # Routes
    app.include_router(create_router(controller))
    app.include_router(create_ws_router(controller))

    return app
