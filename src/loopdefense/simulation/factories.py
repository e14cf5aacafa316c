"""Entity factories: enemies scaled by stage, towers looked up by tier."""

from __future__ import annotations

import random

from loopdefense.config import GameConfig
from loopdefense.units import all_types
from loopdefense.units.towers import TIER_PROBABILITIES, TIER_STATS, role_for_tier

from .entities import Enemy, Tower

BOSS_HP_MULT = 40
BOSS_SPEED_MULT = 0.7
BOSS_SIZE = 32.0
BASE_ENEMY_SIZE = 16.0


def enemy_base_stats(stage: int) -> tuple[float, float]:
    """(hp, speed) of a plain enemy at *stage*."""
    return 12 + stage * 3, 80 + stage * 0.5


def make_enemy(
    enemy_id: int,
    stage: int,
    is_boss: bool = False,
    *,
    rng: random.Random,
    config: GameConfig,
) -> Enemy:
    base_hp, base_speed = enemy_base_stats(stage)
    archetype = rng.choice(all_types())
    if is_boss:
        hp = base_hp * BOSS_HP_MULT
        speed = base_speed * BOSS_SPEED_MULT
        size = BOSS_SIZE
    elif config.use_archetypes:
        hp = base_hp
        speed = base_speed * archetype.speed_mod
        size = BASE_ENEMY_SIZE * archetype.size_mod
    else:
        hp = base_hp
        speed = base_speed
        size = BASE_ENEMY_SIZE
    return Enemy(
        enemy_id=enemy_id,
        hp=round(hp),
        max_hp=round(hp),
        speed=speed,
        size=size,
        is_boss=is_boss,
        type_tag=archetype.type_id,
    )


def make_tower(tower_id: int, x: float, y: float, tier: int) -> Tower:
    stats = TIER_STATS[tier]
    return Tower(
        tower_id=tower_id,
        x=x,
        y=y,
        tier=tier,
        role=role_for_tier(tier),
        range=stats.range,
        base_damage=stats.damage,
        attack_speed=stats.speed,
    )


def random_tier(rng: random.Random) -> int:
    """Weighted draw over TIER_PROBABILITIES; tier 1 if float rounding leaves the roll unmatched."""
    roll = rng.random()
    cumulative = 0.0
    for tier, chance in TIER_PROBABILITIES:
        cumulative += chance
        if roll <= cumulative:
            return tier
    return 1
