"""SimulationEngine — owns one session and advances it one frame at a time.

Architecture
------------
The engine is the sole owner of the session's GameState.  The host calls
``tick(dt)`` once per rendered frame; nothing runs in the background and
no locks are taken.  Each tick runs the subsystems in a fixed order:

  1. queued intents      (IntentQueue.drain -> apply)
  2. phase clock         (GameMode)
  3. spawns              (SpawnScheduler)
  4. movement            (advance_enemies)
  5. towers              (CombatSystem.tick_towers)
  6. projectiles         (CombatSystem.tick_projectiles)
  7. kill sweep          (CombatSystem.sweep_dead)
  8. loss check          (live enemies >= max_alive -> game_over)
  9. cosmetic effects    (CombatSystem.tick_effects)

``dt`` is clamped to ``[0, max_frame_dt]`` first so a backgrounded tab
resuming after seconds of silence advances at most one short step instead
of spawning a burst of catch-up enemies.

Once ``game_over`` or ``victory`` is set, steps 2-8 are no-ops: stage,
gold, enemies and towers freeze.  Only effects keep fading.

Player input arrives as intents (see ``intents.py``).  ``apply()`` runs
one immediately and returns whether it changed anything; ``post()``
defers it to the next tick.  Neither raises for an invalid or
unaffordable request.
"""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING, Callable

from loguru import logger

from loopdefense.config import DEFAULT_CONFIG, GameConfig

from .combat import CombatSystem
from .economy import tower_damage, try_spend, upgrade_cost, credit
from .factories import make_tower, random_tier
from .game_mode import GameMode
from .intents import (
    CancelDrag,
    FinalizePlacement,
    Intent,
    IntentQueue,
    PickTower,
    RequestDraw,
    RequestUpgrade,
    SelectTower,
    SetTowerPosition,
)
from .movement import advance_enemies
from .path import LoopPath
from .spawner import SpawnScheduler
from .state import GameState

if TYPE_CHECKING:
    from loopdefense.comms.event_bus import EventBus

    from .entities import Tower


class SimulationEngine:
    """Single-session tower-defense simulation driven by ``tick(dt)``."""

    def __init__(self, event_bus: EventBus, config: GameConfig | None = None,
                 rng: random.Random | None = None, seed: int | None = None) -> None:
        self._event_bus = event_bus
        self._config = config or DEFAULT_CONFIG
        self._rng = rng if rng is not None else random.Random(seed)
        self._path = LoopPath.from_config(self._config)
        self._state = GameState.new(self._config)
        self._intents = IntentQueue()

        self.game_mode = GameMode(event_bus, self._config)
        self.spawner = SpawnScheduler(event_bus, self._config, self._rng)
        self.combat = CombatSystem(event_bus, self._config, self._path)

        self._handlers: dict[type, Callable[..., bool]] = {
            RequestDraw: self._on_draw,
            RequestUpgrade: self._on_upgrade,
            SetTowerPosition: self._on_move,
            FinalizePlacement: self._on_finalize,
            SelectTower: self._on_select,
            PickTower: self._on_pick,
            CancelDrag: self._on_cancel_drag,
        }
        self._tick_counter = 0

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def path(self) -> LoopPath:
        return self._path

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def tick_count(self) -> int:
        return self._tick_counter

    # -- Tick ---------------------------------------------------------------

    def clamp_dt(self, dt: float) -> float:
        return min(max(dt, 0.0), self._config.max_frame_dt)

    def tick(self, dt: float) -> None:
        """Advance the session by one frame of (clamped) length *dt*."""
        dt = self.clamp_dt(dt)
        state = self._state
        self._tick_counter += 1

        for intent in self._intents.drain():
            self.apply(intent)

        if not state.terminal:
            state.elapsed += dt
        self.game_mode.tick(state, dt)
        self.spawner.tick(state, dt)
        advance_enemies(state, dt)
        self.combat.tick_towers(state, dt)
        self.combat.tick_projectiles(state, dt)
        if not state.terminal:
            self.combat.sweep_dead(state)
        self._check_game_over()
        self.combat.tick_effects(state, dt)

    def _check_game_over(self) -> None:
        state = self._state
        if state.terminal:
            return
        alive = len(state.enemies)
        if alive >= self._config.max_alive:
            state.game_over = True
            logger.info(f"Game over: {alive} enemies alive at stage {state.stage}")
            self._event_bus.publish("game_over", {
                "result": "defeat",
                "stage": state.stage,
                "alive": alive,
                "kills": state.kills,
                "gold": state.gold,
            })

    # -- Intents ------------------------------------------------------------

    def post(self, intent: Intent) -> None:
        """Queue *intent* for the start of the next tick."""
        self._intents.post(intent)

    def apply(self, intent: Intent) -> bool:
        """Apply *intent* now.  Returns False when it was a no-op."""
        handler = self._handlers.get(type(intent))
        if handler is None:
            return False
        return handler(intent)

    def _on_draw(self, intent: RequestDraw) -> bool:
        state = self._state
        if state.terminal:
            return False
        if not try_spend(state, self._config.draw_cost):
            return False
        tier = random_tier(self._rng)
        x, y = self._config.staging_position
        tower = make_tower(state.next_tower_id(), x, y, tier)
        state.towers.append(tower)
        state.dragging_tower_id = tower.tower_id
        state.placing_new = True
        state.selected_tower_id = tower.tower_id
        logger.debug(f"Drew tier {tier} {tower.role.value} #{tower.tower_id}")
        self._event_bus.publish("tower_drawn", {
            "tower_id": tower.tower_id, "tier": tier, "role": tower.role.value, "gold": state.gold,
        })
        return True

    def _on_upgrade(self, intent: RequestUpgrade) -> bool:
        state = self._state
        tower = state.get_tower(intent.tower_id)
        if tower is None or state.terminal:
            return False
        if not try_spend(state, upgrade_cost(tower)):
            return False
        tower.level += 1
        logger.debug(f"Upgraded tower #{tower.tower_id} to level {tower.level}")
        self._event_bus.publish("tower_upgraded", {
            "tower_id": tower.tower_id, "level": tower.level, "gold": state.gold,
        })
        return True

    def _on_move(self, intent: SetTowerPosition) -> bool:
        state = self._state
        tower = state.get_tower(intent.tower_id)
        if tower is None or not (math.isfinite(intent.x) and math.isfinite(intent.y)):
            return False
        if state.dragging_tower_id != tower.tower_id:
            state.dragging_tower_id = tower.tower_id
            state.placing_new = False
        tower.x = intent.x
        tower.y = intent.y
        return True

    def _on_finalize(self, intent: FinalizePlacement) -> bool:
        state = self._state
        tower = state.get_tower(intent.tower_id)
        if tower is None:
            return False
        is_new = state.placing_new and state.dragging_tower_id == tower.tower_id
        if state.dragging_tower_id == tower.tower_id:
            state.dragging_tower_id = None
            state.placing_new = False
        if self.is_inside_inner(tower.x, tower.y):
            return True
        if is_new:
            state.remove_tower(tower.tower_id)
            credit(state, self._config.draw_cost)
            logger.debug(f"Placement of tower #{tower.tower_id} cancelled, refunded {self._config.draw_cost}")
            self._event_bus.publish("placement_cancelled", {
                "tower_id": tower.tower_id, "refund": self._config.draw_cost, "gold": state.gold,
            })
        else:
            tower.x, tower.y = self.clamp_to_inner(tower.x, tower.y)
        return True

    def _on_select(self, intent: SelectTower) -> bool:
        state = self._state
        if intent.tower_id is not None and state.get_tower(intent.tower_id) is None:
            return False
        state.selected_tower_id = intent.tower_id
        return True

    def _on_pick(self, intent: PickTower) -> bool:
        state = self._state
        if state.terminal:
            return False
        tower = self.tower_at(intent.x, intent.y)
        if tower is None:
            return False
        state.dragging_tower_id = tower.tower_id
        state.placing_new = False
        state.selected_tower_id = tower.tower_id
        return True

    def _on_cancel_drag(self, intent: CancelDrag) -> bool:
        state = self._state
        tower = state.get_tower(state.dragging_tower_id)
        if tower is not None and not state.placing_new:
            tower.x, tower.y = self.clamp_to_inner(tower.x, tower.y)
        changed = state.dragging_tower_id is not None
        state.dragging_tower_id = None
        state.placing_new = False
        return changed

    # -- Placement geometry -------------------------------------------------

    def is_inside_inner(self, x: float, y: float) -> bool:
        start, end = self._config.inner_start, self._config.inner_end
        return start < x < end and start < y < end

    def clamp_to_inner(self, x: float, y: float) -> tuple[float, float]:
        margin = self._config.placement_margin
        lo = self._config.inner_start + margin
        hi = self._config.inner_end - margin
        return (min(max(x, lo), hi), min(max(y, lo), hi))

    def tower_at(self, x: float, y: float) -> Tower | None:
        for tower in self._state.towers:
            if math.hypot(tower.x - x, tower.y - y) <= self._config.pick_radius:
                return tower
        return None

    # -- Session ------------------------------------------------------------

    def reset_game(self) -> None:
        """Discard the session and start over at stage 1."""
        self._state = GameState.new(self._config)
        self._intents.clear()
        self._tick_counter = 0
        logger.info("Session reset")
        self._event_bus.publish("game_reset", {"stage": 1, "gold": self._state.gold})

    # -- Snapshot -----------------------------------------------------------

    def status_text(self) -> str:
        state = self._state
        if state.game_over:
            return f"Game Over: {self._config.max_alive} enemies on the field!"
        if state.victory:
            return f"Victory! Stage {self._config.stage_max} cleared!"
        return ""

    def tower_view(self, tower: Tower) -> dict:
        cost = upgrade_cost(tower)
        state = self._state
        return {
            "id": tower.tower_id,
            "position": {"x": tower.x, "y": tower.y},
            "tier": tower.tier,
            "level": tower.level,
            "range": tower.range,
            "role": tower.role.value,
            "damage": tower_damage(tower),
            "attack_speed": tower.attack_speed,
            "cooldown": tower.cooldown,
            "upgrade_cost": cost,
            "can_upgrade": state.gold >= cost and not state.terminal,
        }

    def snapshot(self) -> dict:
        """Read-only view of the session for the renderer/HUD."""
        state = self._state
        selected = state.get_tower(state.selected_tower_id)
        dragging = state.get_tower(state.dragging_tower_id)
        return {
            "stage": state.stage,
            "stage_max": self._config.stage_max,
            "phase": state.phase,
            "timer": math.ceil(state.phase_timer),
            "gold": state.gold,
            "alive": len(state.enemies),
            "kills": state.kills,
            "game_over": state.game_over,
            "victory": state.victory,
            "status": self.status_text(),
            "towers": [self.tower_view(t) for t in state.towers],
            "enemies": [e.to_dict(self._path.position(e.progress)) for e in state.enemies],
            "projectiles": self.combat.get_active_projectiles(state),
            "effects": [fx.to_dict() for fx in state.effects],
            "selected": self.tower_view(selected) if selected is not None else None,
            "dragging": {
                "id": dragging.tower_id,
                "is_new": state.placing_new,
                "valid": self.is_inside_inner(dragging.x, dragging.y),
            } if dragging is not None else None,
        }

    def get_game_state(self) -> dict:
        """Compact HUD state (no entity lists)."""
        state = self._state
        return {
            "stage": state.stage,
            "phase": state.phase,
            "timer": math.ceil(state.phase_timer),
            "gold": state.gold,
            "alive": len(state.enemies),
            "kills": state.kills,
            "game_over": state.game_over,
            "victory": state.victory,
            "status": self.status_text(),
        }
