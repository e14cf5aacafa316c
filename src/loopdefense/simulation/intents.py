"""Player intents: the only way the outside world changes a session.

Intents are small frozen records.  The engine applies one immediately via
``SimulationEngine.apply()``; ``IntentQueue`` holds intents posted from
elsewhere until the top of the next tick.  Either way the effect is the
same and invalid intents are no-ops, never errors.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class RequestDraw:
    """Buy a random-tier tower; it appears at the staging point, dragging."""


@dataclass(frozen=True)
class RequestUpgrade:
    tower_id: int


@dataclass(frozen=True)
class SetTowerPosition:
    tower_id: int
    x: float
    y: float


@dataclass(frozen=True)
class FinalizePlacement:
    """Drop the dragged tower: refund if new and off-board, clamp if existing."""

    tower_id: int


@dataclass(frozen=True)
class SelectTower:
    tower_id: int | None


@dataclass(frozen=True)
class PickTower:
    """Pointer pressed at (x, y): select and start dragging the tower under it."""

    x: float
    y: float


@dataclass(frozen=True)
class CancelDrag:
    """Pointer left the board mid-drag."""


Intent = Union[
    RequestDraw,
    RequestUpgrade,
    SetTowerPosition,
    FinalizePlacement,
    SelectTower,
    PickTower,
    CancelDrag,
]

# Wire names used by the WebSocket and REST layers
INTENT_TYPES: dict[str, type] = {
    "draw": RequestDraw,
    "upgrade": RequestUpgrade,
    "move": SetTowerPosition,
    "finalize": FinalizePlacement,
    "select": SelectTower,
    "pick": PickTower,
    "cancel_drag": CancelDrag,
}


class IntentQueue:
    """FIFO of intents waiting for the next tick."""

    def __init__(self) -> None:
        self._pending: deque[Intent] = deque()

    def post(self, intent: Intent) -> None:
        self._pending.append(intent)

    def drain(self) -> list[Intent]:
        drained = list(self._pending)
        self._pending.clear()
        return drained

    def clear(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
