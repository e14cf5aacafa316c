"""Request payload models shared by the REST and WebSocket routers.

Every client-supplied intent passes through one of these before it
reaches the engine, so the simulation only ever sees finite numbers and
integer ids.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Empty(BaseModel):
    """Intent with no fields (draw, cancel_drag)."""


class Point(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class Selection(BaseModel):
    tower_id: Optional[int] = None


class TowerRef(BaseModel):
    tower_id: int


class TowerMove(TowerRef, Point):
    pass


# Payload model per WebSocket intent name; keys match INTENT_TYPES
INTENT_PAYLOADS: dict[str, type[BaseModel]] = {
    "draw": Empty,
    "upgrade": TowerRef,
    "move": TowerMove,
    "finalize": TowerRef,
    "select": Selection,
    "pick": Point,
    "cancel_drag": Empty,
}
