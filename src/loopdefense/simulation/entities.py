"""Entity records for the simulation: enemies, towers, projectiles, effects.

All four are flat mutable dataclasses.  Systems mutate them in place
during a tick; ``to_dict()`` produces the read-only view handed to the
renderer.

Enemies live in an EnemyPool keyed by a stable integer id.  Projectiles
hold only that id, so an enemy removed mid-flight leaves a dangling id
that the combat system detects with a plain lookup.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from loopdefense.units import get_type
from loopdefense.units.base import TowerRole


@dataclass
class Enemy:
    enemy_id: int
    hp: float
    max_hp: int
    speed: float       # units/second along the loop
    size: float
    is_boss: bool
    type_tag: str
    progress: float = 0.0

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def hp_ratio(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return max(0.0, self.hp / self.max_hp)

    def apply_damage(self, amount: float) -> bool:
        """Subtract *amount* hp.  Returns True if this hit brought hp to zero or below."""
        was_alive = self.alive
        self.hp -= amount
        return was_alive and not self.alive

    def to_dict(self, position: tuple[float, float]) -> dict:
        archetype = get_type(self.type_tag)
        return {
            "id": self.enemy_id,
            "position": {"x": position[0], "y": position[1]},
            "hp": self.hp,
            "max_hp": self.max_hp,
            "hp_ratio": self.hp_ratio,
            "is_boss": self.is_boss,
            "type": self.type_tag,
            "name": archetype.display_name if archetype is not None else self.type_tag,
            "palette": archetype.palette() if archetype is not None else None,
            "size": self.size,
            "progress": self.progress,
        }


@dataclass
class Tower:
    tower_id: int
    x: float
    y: float
    tier: int
    role: TowerRole
    range: float
    base_damage: float
    attack_speed: float  # attacks/second
    level: int = 0
    cooldown: float = 0.0

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def attack_interval(self) -> float:
        return 1 / self.attack_speed


@dataclass
class Projectile:
    projectile_id: int
    source_tower_id: int
    target_id: int
    x: float
    y: float
    speed: float
    damage: float
    size: float
    splash: float | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.projectile_id,
            "source_id": self.source_tower_id,
            "target_id": self.target_id,
            "position": {"x": self.x, "y": self.y},
            "speed": self.speed,
            "damage": self.damage,
            "size": self.size,
            "splash": self.splash,
        }


@dataclass
class Effect:
    """Short-lived line drawn for an attack or impact.  Cosmetic only."""

    start: tuple[float, float]
    end: tuple[float, float]
    color: str
    width: float
    life: float

    def to_dict(self) -> dict:
        return {
            "from": {"x": self.start[0], "y": self.start[1]},
            "to": {"x": self.end[0], "y": self.end[1]},
            "color": self.color,
            "width": self.width,
            "life": self.life,
        }


@dataclass
class EnemyPool:
    """Live enemies keyed by id, iterated in spawn order."""

    _enemies: dict[int, Enemy] = field(default_factory=dict)
    _next_id: int = 1

    def next_id(self) -> int:
        eid = self._next_id
        self._next_id += 1
        return eid

    def add(self, enemy: Enemy) -> None:
        self._enemies[enemy.enemy_id] = enemy

    def get(self, enemy_id: int) -> Enemy | None:
        return self._enemies.get(enemy_id)

    def remove_dead(self) -> list[Enemy]:
        """Drop every enemy with hp <= 0 and return them."""
        dead = [e for e in self._enemies.values() if not e.alive]
        for enemy in dead:
            del self._enemies[enemy.enemy_id]
        return dead

    def __iter__(self) -> Iterator[Enemy]:
        return iter(self._enemies.values())

    def __len__(self) -> int:
        return len(self._enemies)

    def __contains__(self, enemy_id: object) -> bool:
        return enemy_id in self._enemies
