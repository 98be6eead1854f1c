# infection_server/services/game_service.py
"""World state: the player store, the enemy store and their lifecycle."""

import logging
import random
import uuid
from dataclasses import asdict
from typing import Dict, List, Optional

from infection_server.config.settings import DEFAULT_EMOJI, NPC_COUNT, NPC_PREFIX
from infection_server.models.entities import Enemy, MobileEntity, Player
from infection_server.services.entity_store import EntityStore
from infection_server.utils.helpers import (
    random_direction,
    random_position,
    random_steps,
)

logger = logging.getLogger(__name__)


class GameService:
    """Aggregate root of the shared world.

    Human players and NPCs share the ``players`` namespace; enemies live in
    ``enemies``. The tick services and the stage scheduler all operate on
    the same instance.
    """

    def __init__(self, npc_count: int = NPC_COUNT, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.players: EntityStore[Player] = EntityStore()
        self.enemies: EntityStore[Enemy] = EntityStore()

        self._initialize_npcs(npc_count)

    def _initialize_npcs(self, count: int):
        """Initialize NPCs with random positions and wander state."""
        for i in range(count):
            npc_id = f"{NPC_PREFIX}{i}"
            x, y = random_position(self.rng)
            dir_x, dir_y = random_direction(self.rng)
            self.players.upsert(
                npc_id,
                Player(
                    id=npc_id,
                    emoji=DEFAULT_EMOJI,
                    x=x,
                    y=y,
                    dirX=dir_x,
                    dirY=dir_y,
                    stepsRemaining=random_steps(self.rng),
                ),
            )

    def create_player(self, player_id: Optional[str] = None) -> Player:
        """Create a new human player at a random position."""
        player_id = player_id or str(uuid.uuid4())
        x, y = random_position(self.rng)
        player = Player(id=player_id, emoji=DEFAULT_EMOJI, x=x, y=y)
        return self.players.upsert(player_id, player)

    def remove_player(self, player_id: str) -> Optional[Player]:
        return self.players.remove(player_id)

    def spawn_enemy(self, enemy_id: str, emoji: str) -> Enemy:
        """Spawn an enemy at a random position with a fresh wander state."""
        x, y = random_position(self.rng)
        dir_x, dir_y = random_direction(self.rng)
        enemy = Enemy(
            id=enemy_id,
            emoji=emoji,
            x=x,
            y=y,
            dirX=dir_x,
            dirY=dir_y,
            stepsRemaining=random_steps(self.rng),
        )
        logger.debug("Spawned %s (%s) at (%.0f, %.0f)", enemy_id, emoji, x, y)
        return self.enemies.upsert(enemy_id, enemy)

    def clear_enemies(self):
        self.enemies.clear()

    def reset_emojis(self) -> List[dict]:
        """Reset every player and NPC to the default emoji.

        Returns ``playerEmojiChanged`` messages for those that changed.
        """
        updates = []
        for player in self.players:
            if player.emoji != DEFAULT_EMOJI:
                player.emoji = DEFAULT_EMOJI
                updates.append(
                    {"type": "playerEmojiChanged", "id": player.id, "emoji": DEFAULT_EMOJI}
                )
        return updates

    # Queries
    def humans(self) -> List[Player]:
        return [p for p in self.players if not p.is_npc]

    def npcs(self) -> List[Player]:
        return [p for p in self.players if p.is_npc]

    def all_entities(self) -> List[MobileEntity]:
        return self.players.values() + self.enemies.values()

    def all_at_least(self, tier: int) -> bool:
        """True when no player or enemy remains below ``tier``."""
        return all(entity.strength >= tier for entity in self.all_entities())

    def survivors(self) -> List[str]:
        """Ids of human players still at the default emoji."""
        return [p.id for p in self.humans() if not p.infected]

    # Getter methods for game state
    def get_all_players(self) -> Dict[str, dict]:
        """Get all players and NPCs as dictionaries keyed by id."""
        return {p.id: asdict(p) for p in self.players}

    def get_all_enemies(self) -> Dict[str, dict]:
        """Get all enemies as dictionaries keyed by id."""
        return {e.id: asdict(e) for e in self.enemies}

    def get_stats(self) -> dict:
        players = self.players.values()
        return {
            "totalHumans": sum(1 for p in players if not p.is_npc),
            "totalNpcs": sum(1 for p in players if p.is_npc),
            "totalEnemies": len(self.enemies),
            "totalInfected": sum(1 for p in players if p.infected),
        }
