"""Tower tier tables.

Ten tiers, drawn at random and fixed for a tower's lifetime.  Base stats,
the per-level damage multiplier and the draw probabilities are read-only
configuration data.
"""

from __future__ import annotations

from types import MappingProxyType

from loopdefense.units.base import TierStats, TowerRole

MIN_TIER = 1
MAX_TIER = 10

TIER_STATS = MappingProxyType({
    1: TierStats(damage=2, speed=1.0, range=110),
    2: TierStats(damage=3, speed=1.1, range=120),
    3: TierStats(damage=4, speed=1.2, range=130),
    4: TierStats(damage=5, speed=1.25, range=140),
    5: TierStats(damage=6, speed=1.35, range=150),
    6: TierStats(damage=8, speed=1.45, range=160),
    7: TierStats(damage=10, speed=1.55, range=170),
    8: TierStats(damage=13, speed=1.65, range=180),
    9: TierStats(damage=16, speed=1.75, range=190),
    10: TierStats(damage=20, speed=1.9, range=210),
})

# Damage gained per upgrade level
TIER_MULTIPLIER = MappingProxyType({
    1: 1.0,
    2: 1.05,
    3: 1.1,
    4: 1.15,
    5: 1.2,
    6: 1.25,
    7: 1.3,
    8: 1.35,
    9: 1.4,
    10: 1.5,
})

# Ordered (tier, chance) pairs; chances sum to 1.0
TIER_PROBABILITIES: tuple[tuple[int, float], ...] = (
    (1, 0.3),
    (2, 0.2),
    (3, 0.15),
    (4, 0.1),
    (5, 0.08),
    (6, 0.06),
    (7, 0.04),
    (8, 0.03),
    (9, 0.02),
    (10, 0.02),
)


def role_for_tier(tier: int) -> TowerRole:
    if tier <= 4:
        return TowerRole.MELEE
    if tier <= 7:
        return TowerRole.RANGED_FAST
    return TowerRole.RANGED_SPLASH
