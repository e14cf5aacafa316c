"""GameState — everything one session mutates, in one place.

Owned by a single SimulationEngine and passed by reference into each
system call.  Nothing in the simulation package keeps module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loopdefense.config import GameConfig

from .entities import Effect, EnemyPool, Projectile, Tower

PREP = "Prep"
FIGHT = "Fight"

@dataclass
class GameState:
    stage: int = 1
    phase: str = PREP
    phase_timer: float = 60.0
    gold: int = 100

    # Fight-phase spawn bookkeeping
    fight_elapsed: float = 0.0
    next_spawn_time: float = 0.0
    boss_spawned: bool = False

    # Terminal outcomes; mutually exclusive
    game_over: bool = False
    victory: bool = False

    enemies: EnemyPool = field(default_factory=EnemyPool)
    towers: list[Tower] = field(default_factory=list)
    projectiles: list[Projectile] = field(default_factory=list)
    effects: list[Effect] = field(default_factory=list)

    # Pointer interaction
    selected_tower_id: int | None = None
    dragging_tower_id: int | None = None
    placing_new: bool = False

    kills: int = 0
    elapsed: float = 0.0
    _next_tower_id: int = 1
    _next_projectile_id: int = 1

    @classmethod
    def new(cls, config: GameConfig) -> GameState:
        return cls(phase_timer=config.prep_time, gold=config.starting_gold)

    @property
    def terminal(self) -> bool:
        return self.game_over or self.victory

    def next_tower_id(self) -> int:
        tid = self._next_tower_id
        self._next_tower_id += 1
        return tid

    def next_projectile_id(self) -> int:
        pid = self._next_projectile_id
        self._next_projectile_id += 1
        return pid

    def get_tower(self, tower_id: int | None) -> Tower | None:
        if tower_id is None:
            return None
        for tower in self.towers:
            if tower.tower_id == tower_id:
                return tower
        return None

    def remove_tower(self, tower_id: int) -> Tower | None:
        tower = self.get_tower(tower_id)
        if tower is not None:
            self.towers.remove(tower)
            if self.selected_tower_id == tower_id:
                self.selected_tower_id = None
        return tower
