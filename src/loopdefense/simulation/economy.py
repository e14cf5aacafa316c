"""Gold formulas.

Every spend goes through :func:`try_spend`, which refuses rather than
letting the balance go negative.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loopdefense.units.towers import TIER_MULTIPLIER

if TYPE_CHECKING:
    from .entities import Tower
    from .state import GameState


def tower_damage(tower: Tower) -> float:
    return tower.base_damage + tower.level * TIER_MULTIPLIER[tower.tier]


def upgrade_cost(tower: Tower) -> int:
    return 10 + 5 * tower.level + 2 * tower.tier


def can_afford(state: GameState, cost: int) -> bool:
    return state.gold >= cost


def try_spend(state: GameState, cost: int) -> bool:
    """Deduct *cost* if the balance covers it.  Returns False (and leaves gold untouched) otherwise."""
    if not can_afford(state, cost):
        return False
    state.gold -= cost
    return True


def credit(state: GameState, amount: int) -> None:
    state.gold += amount
