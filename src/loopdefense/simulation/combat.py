"""CombatSystem — targeting, projectile flight, splash and kill resolution.

Architecture
------------
Each frame runs three passes over the shared GameState:

  1. ``tick_towers()`` counts every tower's cooldown down.  A ready tower
     picks the nearest live enemy inside its range (first in spawn order
     wins a tie) and attacks according to its role:
       - knight (melee): damage lands immediately
       - archer (fast ranged): launches a fast single-target projectile
       - mage (splash ranged): launches a slow projectile that splashes
     The cooldown is then *reset* to ``1 / attack_speed``.  A tower that
     became ready mid-frame does not bank the overshoot.

  2. ``tick_projectiles()`` moves each projectile toward its target's
     *current* position (homing).  It lands when the remaining distance is
     within this frame's step or under ``impact_epsilon``.  Projectiles
     hold an enemy id, not the enemy; a missing or dead target means the
     projectile is dropped without effect.

     A mage projectile hits its target for full damage and then splashes
     ``splash_factor`` of that damage onto every live enemy within
     ``splash_radius`` of the impact point.  The primary target sits at
     the impact point, so with ``splash_hits_primary`` on (the shipped
     behaviour) it is hit twice.

  3. ``sweep_dead()`` removes every enemy at hp <= 0 and credits the kill
     reward, in the same frame the damage landed.

Events published on the EventBus:
  - ``tower_fired``: any attack (melee hits included)
  - ``projectile_hit``: a projectile landed
  - ``enemy_killed``: an enemy was removed and gold credited
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from loguru import logger

from loopdefense.units.base import TowerRole

from .economy import credit, tower_damage
from .entities import Effect, Enemy, Projectile

if TYPE_CHECKING:
    from loopdefense.comms.event_bus import EventBus
    from loopdefense.config import GameConfig

    from .entities import Tower
    from .path import LoopPath
    from .state import GameState

MELEE_EFFECT_COLOR = "rgba(251, 191, 36, 0.7)"
SPLASH_LAUNCH_COLOR = "rgba(99, 102, 241, 0.5)"
SPLASH_IMPACT_COLOR = "rgba(165, 180, 252, 0.7)"


class CombatSystem:
    """Fires towers, flies projectiles, and removes the dead."""

    def __init__(self, event_bus: EventBus, config: GameConfig, path: LoopPath) -> None:
        self._event_bus = event_bus
        self._config = config
        self._path = path

    # -- Targeting --------------------------------------------------------------

    def find_target(self, tower: Tower, state: GameState) -> Enemy | None:
        """Nearest live enemy within range; ties keep the earliest spawned."""
        target: Enemy | None = None
        closest = math.inf
        for enemy in state.enemies:
            if not enemy.alive:
                continue
            ex, ey = self._path.position(enemy.progress)
            dist = math.hypot(tower.x - ex, tower.y - ey)
            if dist <= tower.range and dist < closest:
                closest = dist
                target = enemy
        return target

    # -- Towers -----------------------------------------------------------------

    def tick_towers(self, state: GameState, dt: float) -> None:
        if state.terminal:
            return
        for tower in state.towers:
            tower.cooldown -= dt
            if tower.cooldown > 0:
                continue
            target = self.find_target(tower, state)
            if target is None:
                continue
            self._attack(tower, target, state)
            tower.cooldown = tower.attack_interval

    def _attack(self, tower: Tower, target: Enemy, state: GameState) -> None:
        cfg = self._config
        damage = tower_damage(tower)
        target_pos = self._path.position(target.progress)

        if tower.role is TowerRole.MELEE:
            target.apply_damage(damage)
            self._add_effect(state, tower.position, target_pos, MELEE_EFFECT_COLOR, 3)
        elif tower.role is TowerRole.RANGED_FAST:
            self._launch(state, tower, target, damage,
                         speed=cfg.fast_projectile_speed, size=cfg.fast_projectile_size)
        else:
            self._launch(state, tower, target, damage,
                         speed=cfg.splash_projectile_speed, size=cfg.splash_projectile_size,
                         splash=cfg.splash_radius)
            self._add_effect(state, tower.position, target_pos, SPLASH_LAUNCH_COLOR, 2)

        self._event_bus.publish("tower_fired", {
            "tower_id": tower.tower_id,
            "role": tower.role.value,
            "target_id": target.enemy_id,
            "damage": damage,
        })

    def _launch(self, state: GameState, tower: Tower, target: Enemy, damage: float,
                speed: float, size: float, splash: float | None = None) -> Projectile:
        proj = Projectile(
            projectile_id=state.next_projectile_id(),
            source_tower_id=tower.tower_id,
            target_id=target.enemy_id,
            x=tower.x,
            y=tower.y,
            speed=speed,
            damage=damage,
            size=size,
            splash=splash,
        )
        state.projectiles.append(proj)
        return proj

    # -- Projectiles ------------------------------------------------------------

    def tick_projectiles(self, state: GameState, dt: float) -> None:
        if state.terminal:
            return
        remaining: list[Projectile] = []
        for proj in state.projectiles:
            target = state.enemies.get(proj.target_id)
            if target is None or not target.alive:
                continue
            tx, ty = self._path.position(target.progress)
            dx = tx - proj.x
            dy = ty - proj.y
            dist = math.hypot(dx, dy)
            step = proj.speed * dt
            if dist <= step or dist < self._config.impact_epsilon:
                self._impact(proj, target, (tx, ty), state)
                continue
            proj.x += dx / dist * step
            proj.y += dy / dist * step
            remaining.append(proj)
        state.projectiles = remaining

    def _impact(self, proj: Projectile, target: Enemy, point: tuple[float, float],
                state: GameState) -> None:
        target.apply_damage(proj.damage)
        splashed = 0
        if proj.splash:
            splashed = self._splash(proj, target, point, state)
            px, py = point
            self._add_effect(state, (px - 10, py - 10), (px + 10, py + 10), SPLASH_IMPACT_COLOR, 4)
        self._event_bus.publish("projectile_hit", {
            "projectile_id": proj.projectile_id,
            "source_id": proj.source_tower_id,
            "target_id": target.enemy_id,
            "damage": proj.damage,
            "remaining_hp": target.hp,
            "splashed": splashed,
            "position": {"x": point[0], "y": point[1]},
        })

    def _splash(self, proj: Projectile, target: Enemy, point: tuple[float, float],
                state: GameState) -> int:
        amount = proj.damage * self._config.splash_factor
        hits = 0
        for enemy in state.enemies:
            if not enemy.alive:
                continue
            if enemy is target and not self._config.splash_hits_primary:
                continue
            ex, ey = self._path.position(enemy.progress)
            if math.hypot(ex - point[0], ey - point[1]) <= proj.splash:
                enemy.apply_damage(amount)
                hits += 1
        return hits

    # -- Kills ------------------------------------------------------------------

    def sweep_dead(self, state: GameState) -> list[Enemy]:
        """Remove dead enemies and pay the kill reward for each."""
        dead = state.enemies.remove_dead()
        for enemy in dead:
            credit(state, self._config.kill_reward)
            state.kills += 1
            logger.debug(f"Killed {'boss' if enemy.is_boss else enemy.type_tag} #{enemy.enemy_id}")
            self._event_bus.publish("enemy_killed", {
                "id": enemy.enemy_id,
                "is_boss": enemy.is_boss,
                "reward": self._config.kill_reward,
                "gold": state.gold,
            })
        return dead

    # -- Effects ----------------------------------------------------------------

    def _add_effect(self, state: GameState, start: tuple[float, float],
                    end: tuple[float, float], color: str, width: float) -> None:
        state.effects.append(Effect(start, end, color, width, self._config.effect_life))

    @staticmethod
    def tick_effects(state: GameState, dt: float) -> None:
        for effect in state.effects:
            effect.life -= dt
        state.effects = [e for e in state.effects if e.life > 0]

    @staticmethod
    def get_active_projectiles(state: GameState) -> list[dict]:
        """Serializable projectile list for late-joining renderers."""
        return [p.to_dict() for p in state.projectiles]
