# infection_server/api/routes.py
"""API routes for the game server."""

from fastapi import APIRouter

from infection_server.config.settings import get_game_config
from infection_server.services.game_service import GameService
from infection_server.services.websocket_service import WebSocketService


class GameAPI:
    """API routes for game-related endpoints."""

    def __init__(self, game_service: GameService, websocket_service: WebSocketService):
        self.game_service = game_service
        self.websocket_service = websocket_service
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):
        """Set up all API routes."""

        @self.router.get("/")
        async def root():
            """Root endpoint."""
            return {"message": "Emoji Infection Server Running"}

        @self.router.get("/api/game/config")
        async def get_game_config_endpoint():
            """Get game configuration: world size, tiers, speeds and stage timing."""
            return get_game_config()

        @self.router.get("/api/game/players")
        async def get_players():
            """Get all current players and NPCs."""
            return {"players": self.game_service.get_all_players()}

        @self.router.get("/api/game/enemies")
        async def get_enemies():
            """Get all current enemies."""
            return {"enemies": self.game_service.get_all_enemies()}

        @self.router.get("/api/game/stage")
        async def get_stage():
            """Get the current stage cycle."""
            return self.websocket_service.scheduler.snapshot()

        @self.router.get("/api/game/stats")
        async def get_game_stats():
            """Get game statistics."""
            return {
                **self.game_service.get_stats(),
                "totalConnections": len(self.websocket_service.clients),
            }
