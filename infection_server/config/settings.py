# infection_server/config/settings.py
"""Game configuration constants and settings.

Every constant can be overridden with an environment variable of the same name.
"""

import os


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


# Server settings
HOST = os.environ.get("HOST", "127.0.0.1")
PORT = _env_int("PORT", 3000)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# World settings
CANVAS_SIZE = _env_int("CANVAS_SIZE", 600)
ENTITY_SIZE = _env_int("ENTITY_SIZE", 32)
COLLISION_RADIUS = _env_float("COLLISION_RADIUS", ENTITY_SIZE / 2)

# Emoji tiers, weakest first. Strength is the index in this tuple.
DEFAULT_EMOJI = "😊"
TIER1_EMOJI = "🤔"
TIER2_EMOJI = "😠"
TIER3_EMOJI = "👿"
EMOJI_TIERS = (DEFAULT_EMOJI, TIER1_EMOJI, TIER2_EMOJI, TIER3_EMOJI)

# NPC settings
NPC_PREFIX = "npc_"
NPC_COUNT = _env_int("NPC_COUNT", 100)
NPC_SPEED = _env_float("NPC_SPEED", 2)
NPC_MIN_STEPS = _env_int("NPC_MIN_STEPS", 10)
NPC_MAX_STEPS = _env_int("NPC_MAX_STEPS", 30)
# Wander directions, idle included
DIRECTIONS = (
    (0, 1), (1, 0), (0, -1), (-1, 0),
    (1, 1), (1, -1), (-1, 1), (-1, -1),
    (0, 0),
)

# Enemy settings
ENEMY_PREFIX = "enemy"
ENEMY_SPEED = _env_float("ENEMY_SPEED", 3)
TRACK_DISTANCE = _env_float("TRACK_DISTANCE", 150)

# Human input: 0 disables the per-message step limit
MAX_PLAYER_STEP = _env_float("MAX_PLAYER_STEP", 0)

# Stage settings
TOTAL_STAGES = 3
STAGE_DURATION = _env_int("STAGE_DURATION", 60000)  # ms
STAGE_WATCH_INTERVAL = _env_int("STAGE_WATCH_INTERVAL", 500)  # ms
RESTART_DELAY = _env_int("RESTART_DELAY", 10000)  # ms

# Tick rates
MOVE_TICK_MS = _env_int("MOVE_TICK_MS", 50)
ENEMY_TICK_MS = _env_int("ENEMY_TICK_MS", 100)
INFECTION_TICK_MS = _env_int("INFECTION_TICK_MS", 50)


def get_game_config():
    """Get the client-facing game configuration as a dictionary."""
    return {
        "canvasSize": CANVAS_SIZE,
        "entitySize": ENTITY_SIZE,
        "collisionRadius": COLLISION_RADIUS,
        "emojiTiers": list(EMOJI_TIERS),
        "npcCount": NPC_COUNT,
        "npcSpeed": NPC_SPEED,
        "enemySpeed": ENEMY_SPEED,
        "trackDistance": TRACK_DISTANCE,
        "stageDuration": STAGE_DURATION,
        "totalStages": TOTAL_STAGES,
        "restartDelay": RESTART_DELAY,
    }
