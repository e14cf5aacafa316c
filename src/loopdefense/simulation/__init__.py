"""Tower-defense simulation core — one session advanced frame by frame.

Package layout:
  path.py       — LoopPath (progress -> (x, y) on the rectangular loop)
  entities.py   — Enemy, Tower, Projectile, Effect, EnemyPool
  factories.py  — make_enemy / make_tower / random_tier
  economy.py    — damage and upgrade-cost formulas, guarded spending
  state.py      — GameState (the whole mutable session)
  game_mode.py  — GameMode (Prep/Fight clock, stage progression, victory)
  spawner.py    — SpawnScheduler (per-second spawns, milestone bosses)
  movement.py   — advance_enemies
  combat.py     — CombatSystem (targeting, projectiles, splash, kill sweep)
  intents.py    — player intents and the IntentQueue
  engine.py     — SimulationEngine (fixed-order tick, intents, snapshots)
"""

from .combat import CombatSystem
from .engine import SimulationEngine
from .entities import Effect, Enemy, EnemyPool, Projectile, Tower
from .game_mode import GameMode
from .intents import (
    INTENT_TYPES,
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
from .path import LoopPath
from .spawner import SpawnScheduler
from .state import FIGHT, PREP, GameState

__all__ = [
    "CancelDrag",
    "CombatSystem",
    "Effect",
    "Enemy",
    "EnemyPool",
    "FIGHT",
    "FinalizePlacement",
    "GameMode",
    "GameState",
    "INTENT_TYPES",
    "Intent",
    "IntentQueue",
    "LoopPath",
    "PREP",
    "PickTower",
    "Projectile",
    "RequestDraw",
    "RequestUpgrade",
    "SelectTower",
    "SetTowerPosition",
    "SimulationEngine",
    "SpawnScheduler",
    "Tower",
]
