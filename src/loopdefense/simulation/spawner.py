"""SpawnScheduler — one enemy per second for the first half of each fight.

Normal enemies are scheduled at whole-second instants 0, 1, ..., 29 of
the fight.  A long frame spawns every instant it stepped over, so the
count per fight does not depend on frame rate.  On stages that are a
multiple of ``boss_every`` a single boss joins once the fight is
``boss_delay`` seconds old.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from loguru import logger

from .factories import make_enemy
from .state import FIGHT

if TYPE_CHECKING:
    from loopdefense.comms.event_bus import EventBus
    from loopdefense.config import GameConfig

    from .entities import Enemy
    from .state import GameState


class SpawnScheduler:

    def __init__(self, event_bus: EventBus, config: GameConfig, rng: random.Random) -> None:
        self._event_bus = event_bus
        self._config = config
        self._rng = rng

    def tick(self, state: GameState, dt: float) -> list[Enemy]:
        """Advance the fight clock and return whatever spawned this frame."""
        if state.phase != FIGHT or state.terminal:
            return []
        cfg = self._config
        spawned: list[Enemy] = []
        state.fight_elapsed += dt
        if state.fight_elapsed <= cfg.spawn_window:
            while (state.next_spawn_time <= state.fight_elapsed
                   and state.next_spawn_time < cfg.spawn_window):
                spawned.append(self._spawn(state, is_boss=False))
                state.next_spawn_time += cfg.spawn_interval

        if (state.stage % cfg.boss_every == 0
                and not state.boss_spawned
                and state.fight_elapsed >= cfg.boss_delay):
            spawned.append(self._spawn(state, is_boss=True))
            state.boss_spawned = True
        return spawned

    def _spawn(self, state: GameState, is_boss: bool) -> Enemy:
        enemy = make_enemy(
            state.enemies.next_id(), state.stage, is_boss,
            rng=self._rng, config=self._config,
        )
        state.enemies.add(enemy)
        if is_boss:
            logger.info(f"Stage {state.stage}: boss spawned ({enemy.max_hp} hp)")
            self._event_bus.publish("boss_spawned", {
                "id": enemy.enemy_id, "stage": state.stage, "hp": enemy.max_hp,
            })
        else:
            logger.debug(f"Spawned {enemy.type_tag} #{enemy.enemy_id} (stage {state.stage})")
            self._event_bus.publish("enemy_spawned", {
                "id": enemy.enemy_id, "type": enemy.type_tag, "stage": state.stage,
            })
        return enemy
