"""Movement along the loop.  Enemies never collide; overlap is fine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import GameState


def advance_enemies(state: GameState, dt: float) -> None:
    if state.terminal:
        return
    for enemy in state.enemies:
        enemy.progress += enemy.speed * dt
