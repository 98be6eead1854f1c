# infection_server/services/stage_service.py
"""Stage state machine: enemy waves, early advance, game over and restart.

States run ``Stage1 -> Stage2 -> Stage3 -> GameOver -> Stage1``. Each stage
leaves through ``advance(reason)``, fired by whichever of the fallback timer
or the watcher gets there first. The one-shot ``advanced`` flag on the
cycle makes the transition idempotent, and both timers of the stage are
cancelled on the way out.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional

from infection_server.config.settings import (
    EMOJI_TIERS,
    ENEMY_PREFIX,
    RESTART_DELAY,
    STAGE_DURATION,
    STAGE_WATCH_INTERVAL,
    TOTAL_STAGES,
)
from infection_server.models.entities import Phase, StageCycle
from infection_server.services.game_service import GameService

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class StageScheduler:
    """Drives the shared game cycle on the event loop."""

    def __init__(
        self,
        game_service: GameService,
        broadcast: Callable[[dict], None],
        loop: Optional[asyncio.AbstractEventLoop] = None,
        stage_duration: int = STAGE_DURATION,
        watch_interval: int = STAGE_WATCH_INTERVAL,
        restart_delay: int = RESTART_DELAY,
        total_stages: int = TOTAL_STAGES,
        clock: Callable[[], int] = _now_ms,
    ):
        self.game_service = game_service
        self.broadcast = broadcast
        self.loop = loop
        self.stage_duration = stage_duration
        self.watch_interval = watch_interval
        self.restart_delay = restart_delay
        self.total_stages = total_stages
        self.clock = clock

        self.cycle = StageCycle()
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    # Timers
    def _call_later(self, name: str, delay_ms: int, callback, *args):
        """Arm the named timer, replacing any pending one of the same name."""
        if self.loop is None:
            self.loop = asyncio.get_running_loop()
        pending = self._timers.pop(name, None)
        if pending is not None:
            pending.cancel()
        handle = self.loop.call_later(delay_ms / 1000, callback, *args)
        self._timers[name] = handle
        return handle

    def cancel_timers(self):
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    # Lifecycle
    def start(self):
        self.start_cycle()

    def stop(self):
        self.cancel_timers()

    def start_cycle(self):
        """Reset the world and begin stage 1."""
        self.cancel_timers()
        game = self.game_service

        for message in game.reset_emojis():
            self.broadcast(message)
        game.clear_enemies()

        now = self.clock()
        self.cycle = StageCycle(startTime=now, stageStartTime=now)
        logger.info("Game cycle started")
        self.broadcast(
            {
                "type": "gameRestart",
                "stageEpoch": now,
                "stageDuration": self.stage_duration,
                "totalStages": self.total_stages,
            }
        )
        self._enter_stage(0)

    def _enter_stage(self, stage_index: int, reason: Optional[str] = None):
        cycle = self.cycle
        cycle.stageIndex = stage_index
        cycle.advanced = False
        if stage_index > 0:
            cycle.stageStartTime = self.clock()

        self._spawn_stage_enemy(stage_index)

        if stage_index > 0:
            self.broadcast(
                {
                    "type": "stageChanged",
                    "stage": stage_index,
                    "stageEpoch": cycle.stageStartTime,
                    "stageDuration": self.stage_duration,
                    "reason": reason,
                }
            )

        self._call_later("timeout", self.stage_duration, self._on_timeout, stage_index)
        self._call_later("watch", self.watch_interval, self._on_watch, stage_index)

    def _spawn_stage_enemy(self, stage_index: int):
        enemy_id = f"{ENEMY_PREFIX}{stage_index + 1}"
        if enemy_id in self.cycle.enemiesSpawned:
            return
        self.cycle.enemiesSpawned.add(enemy_id)

        enemy = self.game_service.spawn_enemy(enemy_id, EMOJI_TIERS[stage_index + 1])
        logger.info("Stage %d: %s spawned", stage_index + 1, enemy_id)
        self.broadcast(
            {
                "type": "enemyJoined",
                "id": enemy.id,
                "emoji": enemy.emoji,
                "x": enemy.x,
                "y": enemy.y,
            }
        )

    # Triggers
    def _on_timeout(self, stage_index: int):
        self.advance("timeout", stage_index)

    def _on_watch(self, stage_index: int):
        if self.cycle.phase is not Phase.RUNNING or stage_index != self.cycle.stageIndex:
            return
        if self.stage_cleared():
            self.advance("cleared", stage_index)
        else:
            self._call_later("watch", self.watch_interval, self._on_watch, stage_index)

    def stage_cleared(self) -> bool:
        """True when every player and enemy reached at least the current stage's tier."""
        return self.game_service.all_at_least(self.cycle.stageIndex + 1)

    def advance(self, reason: str, stage_index: Optional[int] = None) -> bool:
        """Leave the current stage. Returns False if the transition already happened."""
        cycle = self.cycle
        if cycle.phase is not Phase.RUNNING or cycle.advanced:
            return False
        if stage_index is not None and stage_index != cycle.stageIndex:
            return False

        cycle.advanced = True
        self.cancel_timers()
        logger.info("Stage %d over (%s)", cycle.stageIndex + 1, reason)

        next_index = cycle.stageIndex + 1
        if next_index < self.total_stages:
            self._enter_stage(next_index, reason)
        else:
            self._end_game()
        return True

    def _end_game(self):
        self.cycle.phase = Phase.ENDED
        survivors = self.game_service.survivors()
        logger.info("Game over, %d survivor(s)", len(survivors))
        self.broadcast(
            {"type": "gameOver", "survivors": survivors, "restartDelay": self.restart_delay}
        )
        self._call_later("restart", self.restart_delay, self.start_cycle)

    def snapshot(self) -> dict:
        cycle = self.cycle
        return {
            "stageEpoch": cycle.startTime,
            "stageStartTime": cycle.stageStartTime,
            "stageDuration": self.stage_duration,
            "totalStages": self.total_stages,
            "stage": cycle.stageIndex,
            "phase": cycle.phase.value,
            "enemiesSpawned": sorted(cycle.enemiesSpawned),
        }
