"""End-to-end tests for the HTTP routes and the game WebSocket."""

import pytest
from fastapi.testclient import TestClient

from infection_server.config.settings import CANVAS_SIZE, DEFAULT_EMOJI, ENTITY_SIZE
from infection_server.main import create_app
from infection_server.services.game_service import GameService

MAX_COORD = CANVAS_SIZE - ENTITY_SIZE


def _receive_until(ws, message_type, predicate=lambda m: True, limit=500):
    """Read messages until one of ``message_type`` matches ``predicate``."""
    for _ in range(limit):
        message = ws.receive_json()
        if message["type"] == message_type and predicate(message):
            return message
    raise AssertionError(f"no {message_type} message received")


@pytest.fixture
def client():
    app = create_app(GameService(npc_count=3))
    with TestClient(app) as test_client:
        yield test_client


class TestRoutes:
    def test_root(self, client):
        assert client.get("/").json() == {"message": "Emoji Infection Server Running"}

    def test_config(self, client):
        config = client.get("/api/game/config").json()
        assert config["canvasSize"] == CANVAS_SIZE
        assert config["totalStages"] == 3
        assert config["emojiTiers"][0] == DEFAULT_EMOJI

    def test_stage_running_after_startup(self, client):
        stage = client.get("/api/game/stage").json()
        assert stage["phase"] == "running"
        assert "enemy1" in stage["enemiesSpawned"]

    def test_enemies_and_players(self, client):
        assert "enemy1" in client.get("/api/game/enemies").json()["enemies"]
        players = client.get("/api/game/players").json()["players"]
        assert sorted(players) == ["npc_0", "npc_1", "npc_2"]

    def test_stats_count_connections(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            stats = client.get("/api/game/stats").json()
            assert stats["totalHumans"] == 1
            assert stats["totalConnections"] == 1
            assert stats["totalNpcs"] == 3


class TestWebSocket:
    def test_init_snapshot(self, client):
        with client.websocket_connect("/ws") as ws:
            init = ws.receive_json()
            assert init["type"] == "init"
            me = init["players"][init["id"]]
            assert me["emoji"] == DEFAULT_EMOJI
            assert 0 <= me["x"] <= MAX_COORD and 0 <= me["y"] <= MAX_COORD
            assert "enemy1" in init["enemies"]
            assert init["totalStages"] == 3
            assert init["stageEpoch"] > 0
            assert init["stageDuration"] > 0
            assert init["phase"] == "running"

    def test_move_is_echoed_to_sender(self, client):
        with client.websocket_connect("/ws") as ws:
            my_id = ws.receive_json()["id"]
            ws.send_json({"type": "move", "x": 42, "y": 24})
            moved = _receive_until(ws, "playerMoved", lambda m: m["id"] == my_id)
            assert (moved["x"], moved["y"]) == (42, 24)

    def test_malformed_move_ignored(self, client):
        with client.websocket_connect("/ws") as ws:
            my_id = ws.receive_json()["id"]
            ws.send_json({"type": "move", "x": "left"})
            ws.send_json({"type": "unknown"})
            ws.send_text("not json")
            ws.send_bytes(b"\x00\x01")
            ws.send_json({"type": "move", "x": 10, "y": 11})
            moved = _receive_until(ws, "playerMoved", lambda m: m["id"] == my_id)
            assert (moved["x"], moved["y"]) == (10, 11)

    def test_join_and_leave_broadcast(self, client):
        with client.websocket_connect("/ws") as first:
            first_id = first.receive_json()["id"]
            with client.websocket_connect("/ws") as second:
                init = second.receive_json()
                second_id = init["id"]
                assert first_id in init["players"]

                joined = _receive_until(first, "playerJoined")
                assert joined["id"] == second_id
                assert joined["player"]["emoji"] == DEFAULT_EMOJI

            left = _receive_until(first, "playerLeft")
            assert left["id"] == second_id
            assert second_id not in client.get("/api/game/players").json()["players"]

    def test_npc_moves_broadcast(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            moved = _receive_until(ws, "playerMoved", lambda m: m["id"].startswith("npc_"))
            assert 0 <= moved["x"] <= MAX_COORD
