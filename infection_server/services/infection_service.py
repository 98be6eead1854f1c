# infection_server/services/infection_service.py
"""Collision-based infection between stronger and weaker emoji."""

from typing import List

from infection_server.config.settings import COLLISION_RADIUS
from infection_server.models.entities import Enemy, MobileEntity
from infection_server.services.game_service import GameService
from infection_server.utils.helpers import distance_sq


class InfectionService:
    """Converts weaker entities that touch a stronger infector."""

    def __init__(self, game_service: GameService, collision_radius: float = COLLISION_RADIUS):
        self.game_service = game_service
        self.collision_sq = collision_radius * collision_radius

    def infectors(self) -> List[MobileEntity]:
        """Every enemy plus every player or NPC that is already infected."""
        game = self.game_service
        return game.enemies.values() + [p for p in game.players if p.infected]

    def collides(self, a: MobileEntity, b: MobileEntity) -> bool:
        return distance_sq(a.x, a.y, b.x, b.y) < self.collision_sq

    def update(self) -> List[dict]:
        """Run one infection tick. Returns emoji-change messages.

        Several infectors may hit the same victim in one tick; the last one
        in infector order wins.
        """
        game = self.game_service
        updates = []

        for infector in self.infectors():
            for candidate in game.all_entities():
                if candidate.strength >= infector.strength:
                    continue
                if not self.collides(infector, candidate):
                    continue

                candidate.emoji = infector.emoji
                event = "enemyEmojiChanged" if isinstance(candidate, Enemy) else "playerEmojiChanged"
                updates.append({"type": event, "id": candidate.id, "emoji": candidate.emoji})

        return updates
