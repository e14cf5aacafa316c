"""Game control API — state snapshot and player intents."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from loopdefense.simulation.intents import (
    CancelDrag,
    FinalizePlacement,
    PickTower,
    RequestDraw,
    RequestUpgrade,
    SelectTower,
    SetTowerPosition,
)
from loopdefense_api.models import Point, Selection

router = APIRouter(prefix="/api/game", tags=["game"])


def _get_engine(request: Request):
    """Retrieve the SimulationEngine from app state."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(503, "Simulation engine not available")
    return engine


def _require_tower(engine, tower_id: int):
    tower = engine.state.get_tower(tower_id)
    if tower is None:
        raise HTTPException(404, f"No tower with id {tower_id}")
    return tower


def _result(engine, applied: bool, tower_id: int | None = None) -> dict:
    tower = engine.state.get_tower(tower_id)
    return {
        "applied": applied,
        "gold": engine.state.gold,
        "tower": engine.tower_view(tower) if tower is not None else None,
    }


@router.get("/state")
async def get_game_state(request: Request):
    """Full snapshot: HUD values plus tower, enemy, projectile and effect lists."""
    engine = _get_engine(request)
    return engine.snapshot()


@router.get("/hud")
async def get_hud(request: Request):
    """HUD values only."""
    engine = _get_engine(request)
    return engine.get_game_state()


@router.get("/projectiles")
async def get_projectiles(request: Request):
    """Active projectiles for late-joining clients."""
    engine = _get_engine(request)
    return engine.combat.get_active_projectiles(engine.state)


@router.post("/draw")
async def draw_tower(request: Request):
    """Buy a random tower.  It starts at the staging point as a pending placement."""
    engine = _get_engine(request)
    applied = engine.apply(RequestDraw())
    return _result(engine, applied, engine.state.dragging_tower_id if applied else None)


@router.post("/towers/{tower_id}/upgrade")
async def upgrade_tower(tower_id: int, request: Request):
    engine = _get_engine(request)
    _require_tower(engine, tower_id)
    applied = engine.apply(RequestUpgrade(tower_id))
    return _result(engine, applied, tower_id)


@router.post("/towers/{tower_id}/position")
async def move_tower(tower_id: int, point: Point, request: Request):
    engine = _get_engine(request)
    _require_tower(engine, tower_id)
    applied = engine.apply(SetTowerPosition(tower_id, point.x, point.y))
    return _result(engine, applied, tower_id)


@router.post("/towers/{tower_id}/finalize")
async def finalize_tower(tower_id: int, request: Request):
    """Drop a dragged tower.  A new tower dropped off the board is refunded."""
    engine = _get_engine(request)
    _require_tower(engine, tower_id)
    applied = engine.apply(FinalizePlacement(tower_id))
    return _result(engine, applied, tower_id)


@router.post("/select")
async def select_tower(selection: Selection, request: Request):
    engine = _get_engine(request)
    if selection.tower_id is not None:
        _require_tower(engine, selection.tower_id)
    applied = engine.apply(SelectTower(selection.tower_id))
    return _result(engine, applied, selection.tower_id)


@router.post("/pick")
async def pick_tower(point: Point, request: Request):
    """Pointer down at a board position: select and start dragging the tower there."""
    engine = _get_engine(request)
    applied = engine.apply(PickTower(point.x, point.y))
    return _result(engine, applied, engine.state.dragging_tower_id if applied else None)


@router.post("/cancel-drag")
async def cancel_drag(request: Request):
    engine = _get_engine(request)
    tower_id = engine.state.dragging_tower_id
    applied = engine.apply(CancelDrag())
    return _result(engine, applied, tower_id)


@router.post("/reset")
async def reset_game(request: Request):
    """Start a fresh session at stage 1."""
    engine = _get_engine(request)
    engine.reset_game()
    return {"status": "reset", "stage": engine.state.stage, "gold": engine.state.gold}
