"""Unit type registry.

Enemy archetypes are discovered from the ``EnemyType`` subclasses defined
in :mod:`loopdefense.units.enemies`; tower stats are plain tier tables in
:mod:`loopdefense.units.towers`.
"""

from __future__ import annotations

from loopdefense.units import enemies as _enemies  # noqa: F401  (registers subclasses)
from loopdefense.units.base import EnemyType, TierStats, TowerRole
from loopdefense.units.towers import (
    MAX_TIER,
    MIN_TIER,
    TIER_MULTIPLIER,
    TIER_PROBABILITIES,
    TIER_STATS,
    role_for_tier,
)


def all_types() -> list[type[EnemyType]]:
    """Every concrete enemy archetype, in definition order."""
    return [cls for cls in EnemyType.__subclasses__() if hasattr(cls, "type_id")]


def get_type(type_id: str) -> type[EnemyType] | None:
    for cls in all_types():
        if cls.type_id == type_id:
            return cls
    return None


__all__ = [
    "EnemyType",
    "MAX_TIER",
    "MIN_TIER",
    "TIER_MULTIPLIER",
    "TIER_PROBABILITIES",
    "TIER_STATS",
    "TierStats",
    "TowerRole",
    "all_types",
    "get_type",
    "role_for_tier",
]
