# infection_server/services/websocket_service.py
"""WebSocket connection management, message handling and tick loops."""

import asyncio
import json
import logging
from dataclasses import asdict
from typing import Callable, Dict, List, Optional

from fastapi import WebSocket, WebSocketDisconnect

from infection_server.config.settings import (
    ENEMY_TICK_MS,
    INFECTION_TICK_MS,
    MOVE_TICK_MS,
    get_game_config,
)
from .game_service import GameService
from .infection_service import InfectionService
from .movement_service import MovementService
from .stage_service import StageScheduler

logger = logging.getLogger(__name__)


class ClientConnection:
    """One connected client and its ordered outbound queue."""

    def __init__(self, websocket: WebSocket, player_id: str, on_failed: Callable[[str], None]):
        self.websocket = websocket
        self.player_id = player_id
        self.on_failed = on_failed
        self.outbox: asyncio.Queue = asyncio.Queue()

    def send(self, message: dict):
        self.outbox.put_nowait(message)

    async def writer(self):
        """Send queued messages in order until cancelled or the socket fails."""
        try:
            while True:
                message = await self.outbox.get()
                await self.websocket.send_json(message)
        except Exception as e:
            logger.debug("Send to %s failed, dropping client: %s", self.player_id, e)
            self.on_failed(self.player_id)


class WebSocketService:
    """Broadcast gateway: manages connections and drives the simulation ticks."""

    def __init__(self, game_service: GameService):
        self.game_service = game_service
        self.movement = MovementService(game_service)
        self.infection = InfectionService(game_service)
        self.scheduler = StageScheduler(game_service, self.broadcast)
        self.clients: Dict[str, ClientConnection] = {}
        self._tasks: List[asyncio.Task] = []

    # Background tasks
    def start_background_tasks(self):
        """Start the movement, enemy and infection loops and the first game cycle."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._tick_loop(MOVE_TICK_MS, self.movement.update_npcs)),
            asyncio.create_task(self._tick_loop(ENEMY_TICK_MS, self.movement.update_enemies)),
            asyncio.create_task(self._tick_loop(INFECTION_TICK_MS, self.infection.update)),
        ]
        self.scheduler.start()

    async def stop_background_tasks(self):
        self.scheduler.stop()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def _tick_loop(self, interval_ms: int, tick: Callable[[], List[dict]]):
        """Run ``tick`` every ``interval_ms`` and broadcast what it returns."""
        while True:
            await asyncio.sleep(interval_ms / 1000)
            try:
                updates = tick()
            except Exception:
                logger.exception("Tick %s failed", tick.__name__)
                continue

            if self.clients:
                for message in updates:
                    self.broadcast(message)

    # Connections
    async def handle_connection(self, websocket: WebSocket):
        """Handle a new WebSocket connection."""
        await websocket.accept()

        player = self.game_service.create_player()
        client = self.register(websocket, player)
        logger.info("Player %s connected from %s", player.id, websocket.client)

        writer = asyncio.create_task(client.writer())
        try:
            await self._handle_client_messages(websocket, player.id)
        except WebSocketDisconnect:
            logger.info("Player %s disconnected", player.id)
        except Exception as e:
            logger.warning("WebSocket error for player %s: %s", player.id, e)
        finally:
            writer.cancel()
            self._handle_disconnect(player.id)

    def register(self, websocket: WebSocket, player) -> ClientConnection:
        """Queue the snapshot for a new client, then announce it to the others."""
        client = ClientConnection(websocket, player.id, self._handle_disconnect)
        client.send(self._initial_state(player.id))
        self.clients[player.id] = client
        self.broadcast({"type": "playerJoined", "id": player.id, "player": asdict(player)}, exclude=player.id)
        return client

    def _initial_state(self, player_id: str) -> dict:
        stage = self.scheduler.snapshot()
        return {
            "type": "init",
            "id": player_id,
            "config": get_game_config(),
            "players": self.game_service.get_all_players(),
            "enemies": self.game_service.get_all_enemies(),
            "stageEpoch": stage["stageEpoch"],
            "stageStartTime": stage["stageStartTime"],
            "stageDuration": stage["stageDuration"],
            "totalStages": stage["totalStages"],
            "stage": stage["stage"],
            "phase": stage["phase"],
        }

    async def _handle_client_messages(self, websocket: WebSocket, player_id: str):
        """Handle incoming messages from a client."""
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                logger.debug("Ignoring binary frame from %s", player_id)
                continue
            try:
                data = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring non-JSON message from %s", player_id)
                continue
            self._process_message(player_id, data)

    def _process_message(self, player_id: str, data):
        """Process a single message from a client."""
        if not isinstance(data, dict):
            return

        if data.get("type") == "move":
            update = self.movement.apply_player_input(player_id, data)
            if update:
                self.broadcast(update)

    def _handle_disconnect(self, player_id: str):
        """Remove the player's entity and tell everyone else."""
        if self.clients.pop(player_id, None) is None:
            return
        self.game_service.remove_player(player_id)
        self.broadcast({"type": "playerLeft", "id": player_id})

    def broadcast(self, message: dict, exclude: Optional[str] = None):
        """Queue a message for every connected client. Never blocks."""
        for player_id, client in list(self.clients.items()):
            if player_id == exclude:
                continue
            client.send(message)
