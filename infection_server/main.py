# infection_server/main.py
"""FastAPI application: HTTP routes, the game WebSocket and background ticks."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from infection_server.api.routes import GameAPI
from infection_server.config.settings import HOST, LOG_LEVEL, PORT
from infection_server.services.game_service import GameService
from infection_server.services.websocket_service import WebSocketService
from infection_server.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    game_service: Optional[GameService] = None,
    websocket_service: Optional[WebSocketService] = None,
) -> FastAPI:
    """Build the FastAPI app around a single shared world."""
    game_service = game_service or GameService()
    websocket_service = websocket_service or WebSocketService(game_service)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        websocket_service.start_background_tasks()
        logger.info("Game loops started")
        yield
        await websocket_service.stop_background_tasks()
        logger.info("Game loops stopped")

    app = FastAPI(title="Emoji Infection Server", lifespan=lifespan)
    app.state.game_service = game_service
    app.state.websocket_service = websocket_service

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify your client URL
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(GameAPI(game_service, websocket_service).router)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket_service.handle_connection(websocket)

    return app


def run(host: str = HOST, port: int = PORT, log_level: str = LOG_LEVEL):
    import uvicorn

    setup_logging(log_level)
    uvicorn.run(create_app(), host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    run()
