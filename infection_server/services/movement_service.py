# infection_server/services/movement_service.py
"""Per-tick movement for NPCs and enemies, and human position input."""

import logging
import math
from typing import Iterable, List, Optional, Tuple

from infection_server.config.settings import (
    DIRECTIONS,
    ENEMY_SPEED,
    MAX_PLAYER_STEP,
    NPC_SPEED,
    TRACK_DISTANCE,
)
from infection_server.models.entities import MobileEntity
from infection_server.services.game_service import GameService
from infection_server.utils.helpers import (
    clamp_to_world,
    distance_sq,
    is_number,
    normalize,
    random_direction,
    random_steps,
)

logger = logging.getLogger(__name__)

MOVING_DIRECTIONS = [d for d in DIRECTIONS if d != (0, 0)]


class MovementService:
    """Steers autonomous entities: flee stronger, chase weaker, else wander."""

    def __init__(
        self,
        game_service: GameService,
        track_distance: float = TRACK_DISTANCE,
        max_player_step: float = MAX_PLAYER_STEP,
    ):
        self.game_service = game_service
        self.rng = game_service.rng
        self.track_distance_sq = track_distance * track_distance
        self.max_player_step = max_player_step

    def find_targets(
        self, entity: MobileEntity, others: Iterable[MobileEntity]
    ) -> Tuple[Optional[MobileEntity], Optional[MobileEntity]]:
        """Return the nearest stronger (flee) and nearest weaker (chase) entity in range."""
        flee, chase = None, None
        flee_d2 = chase_d2 = self.track_distance_sq
        own = entity.strength

        for other in others:
            if other is entity:
                continue
            d2 = distance_sq(entity.x, entity.y, other.x, other.y)
            if d2 > self.track_distance_sq:
                continue
            theirs = other.strength
            # Strict comparison keeps the first-encountered target on ties
            if theirs > own and (flee is None or d2 < flee_d2):
                flee, flee_d2 = other, d2
            elif theirs < own and (chase is None or d2 < chase_d2):
                chase, chase_d2 = other, d2

        return flee, chase

    def steer(self, entity: MobileEntity, others: Iterable[MobileEntity]):
        """Update the entity's direction for this tick."""
        flee, chase = self.find_targets(entity, others)

        if flee is not None:
            dir_x, dir_y = normalize(entity.x - flee.x, entity.y - flee.y)
            if dir_x == 0 and dir_y == 0:
                dir_x, dir_y = self.rng.choice(MOVING_DIRECTIONS)
            entity.dirX, entity.dirY = dir_x, dir_y
        elif chase is not None:
            entity.dirX, entity.dirY = normalize(chase.x - entity.x, chase.y - entity.y)
        else:
            self.wander(entity)

    def wander(self, entity: MobileEntity):
        """Run straight for a number of steps, then roll a new direction."""
        if entity.stepsRemaining <= 0:
            entity.dirX, entity.dirY = random_direction(self.rng)
            entity.stepsRemaining = random_steps(self.rng)
        entity.stepsRemaining -= 1

    @staticmethod
    def integrate(entity: MobileEntity, speed: float):
        entity.x, entity.y = clamp_to_world(
            entity.x + entity.dirX * speed, entity.y + entity.dirY * speed
        )

    def update_npcs(self) -> List[dict]:
        """Move every NPC one tick. Returns ``playerMoved`` messages."""
        game = self.game_service
        others = game.all_entities()
        updates = []

        for npc in game.npcs():
            self.steer(npc, others)
            self.integrate(npc, NPC_SPEED)
            updates.append({"type": "playerMoved", "id": npc.id, "x": npc.x, "y": npc.y})

        return updates

    def update_enemies(self) -> List[dict]:
        """Move every enemy one tick. Returns ``enemyMoved`` messages."""
        game = self.game_service
        others = game.all_entities()
        updates = []

        for enemy in game.enemies:
            self.steer(enemy, others)
            self.integrate(enemy, ENEMY_SPEED)
            updates.append({"type": "enemyMoved", "id": enemy.id, "x": enemy.x, "y": enemy.y})

        return updates

    def apply_player_input(self, player_id: str, data: dict) -> Optional[dict]:
        """Store a human player's submitted position.

        Returns the ``playerMoved`` message to relay, or None when the input
        is malformed or the player no longer exists.
        """
        player = self.game_service.players.get(player_id)
        if player is None or player.is_npc:
            return None

        x, y = data.get("x"), data.get("y")
        if not (is_number(x) and is_number(y)):
            logger.debug("Ignoring malformed move from %s: %r", player_id, data)
            return None

        if self.max_player_step > 0:
            dx, dy = x - player.x, y - player.y
            dist = math.hypot(dx, dy)
            if dist > self.max_player_step:
                scale = self.max_player_step / dist
                x, y = player.x + dx * scale, player.y + dy * scale

        player.x, player.y = clamp_to_world(x, y)
        return {"type": "playerMoved", "id": player.id, "x": player.x, "y": player.y}
