# infection_server/models/entities.py
"""Game entity models and data classes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Set

from infection_server.config.settings import DEFAULT_EMOJI, NPC_PREFIX
from infection_server.utils.helpers import strength


@dataclass
class MobileEntity:
    """Anything with a position, an emoji tier and a movement vector."""

    id: str
    emoji: str
    x: float
    y: float
    dirX: float = 0
    dirY: float = 0
    stepsRemaining: int = 0

    @property
    def strength(self) -> int:
        return strength(self.emoji)

    @property
    def infected(self) -> bool:
        return self.emoji != DEFAULT_EMOJI


@dataclass
class Player(MobileEntity):
    """Represents a human player or an NPC sharing the player namespace."""

    @property
    def is_npc(self) -> bool:
        return self.id.startswith(NPC_PREFIX)


@dataclass
class Enemy(MobileEntity):
    """Represents a stage enemy. Enemies are always autonomous."""


class Phase(str, Enum):
    RUNNING = "running"
    ENDED = "ended"


@dataclass
class StageCycle:
    """State of the single shared game cycle."""

    stageIndex: int = 0
    startTime: int = 0  # ms epoch of the cycle
    stageStartTime: int = 0  # ms epoch of the current stage
    enemiesSpawned: Set[str] = field(default_factory=set)
    phase: Phase = Phase.RUNNING
    advanced: bool = False
