"""GameMode — the Prep/Fight phase clock and stage progression.

Architecture
------------
A session cycles through two timed phases per stage:

  Prep (prep_time) -> Fight (fight_time) -> stage + 1 -> Prep -> ... -> victory

Prep is the player's window to draw, place and upgrade towers.  Entering
Fight resets the spawn bookkeeping (``fight_elapsed``, ``next_spawn_time``,
``boss_spawned``) that the SpawnScheduler reads.  Finishing the Fight of
the last stage sets ``victory``; defeat is decided elsewhere (live enemy
count) and also stops this clock.

Timer overshoot is discarded: a phase that ends 30ms late starts the next
phase with its full duration.

Events published on the EventBus:
  - ``phase_change``: any Prep/Fight transition
  - ``stage_advanced``: stage number incremented
  - ``game_over``: victory (defeat is published by the engine)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .state import FIGHT, PREP

if TYPE_CHECKING:
    from loopdefense.comms.event_bus import EventBus
    from loopdefense.config import GameConfig

    from .state import GameState


class GameMode:
    """Advances the phase timer and applies phase/stage transitions."""

    def __init__(self, event_bus: EventBus, config: GameConfig) -> None:
        self._event_bus = event_bus
        self._config = config

    def tick(self, state: GameState, dt: float) -> None:
        if state.terminal:
            return
        state.phase_timer -= dt
        if state.phase_timer > 0:
            return
        if state.phase == PREP:
            self._enter_fight(state)
        elif state.stage >= self._config.stage_max:
            self._declare_victory(state)
        else:
            self._advance_stage(state)

    # -- Transitions ------------------------------------------------------------

    def _enter_fight(self, state: GameState) -> None:
        state.phase = FIGHT
        state.phase_timer = self._config.fight_time
        state.fight_elapsed = 0.0
        state.next_spawn_time = 0.0
        state.boss_spawned = False
        logger.info(f"Stage {state.stage}: fight begins")
        self._publish_phase(state)

    def _advance_stage(self, state: GameState) -> None:
        state.stage += 1
        state.phase = PREP
        state.phase_timer = self._config.prep_time
        logger.info(f"Stage {state.stage}: prep begins ({state.gold} gold, {len(state.enemies)} alive)")
        self._event_bus.publish("stage_advanced", {"stage": state.stage})
        self._publish_phase(state)

    def _declare_victory(self, state: GameState) -> None:
        state.victory = True
        logger.info(f"Victory: stage {state.stage} cleared with {state.kills} kills")
        self._event_bus.publish("game_over", {
            "result": "victory",
            "stage": state.stage,
            "kills": state.kills,
            "gold": state.gold,
        })

    def _publish_phase(self, state: GameState) -> None:
        self._event_bus.publish("phase_change", {
            "stage": state.stage,
            "phase": state.phase,
            "phase_timer": state.phase_timer,
        })
