"""Base classes for the unit type system.

TowerRole  -- enum for how a tower delivers damage
TierStats  -- frozen dataclass for a tier's base combat profile
EnemyType  -- abstract base every enemy archetype subclasses
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class TowerRole(Enum):
    """How a tower attacks."""
    MELEE = "knight"          # instant hit
    RANGED_FAST = "archer"    # fast single-target projectile
    RANGED_SPLASH = "mage"    # slow projectile with area damage

    @property
    def is_ranged(self) -> bool:
        return self is not TowerRole.MELEE


@dataclass(frozen=True)
class TierStats:
    """Immutable base profile for a tower tier."""
    damage: float
    speed: float   # attacks per second
    range: float


class EnemyType:
    """Abstract base for every enemy archetype.

    Subclasses MUST set all ClassVar fields.  The registry discovers
    concrete subclasses automatically at import time.
    """

    type_id: ClassVar[str]
    display_name: ClassVar[str]

    size_mod: ClassVar[float]
    speed_mod: ClassVar[float]

    # -- rendering hints, exposed per enemy in the snapshot --
    tint: ClassVar[str]
    skin: ClassVar[str]
    armor: ClassVar[str]

    @classmethod
    def palette(cls) -> dict[str, str]:
        return {"tint": cls.tint, "skin": cls.skin, "armor": cls.armor}
