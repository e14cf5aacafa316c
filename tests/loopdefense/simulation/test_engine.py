"""Integration tests for SimulationEngine — tick pipeline, intents, placement, snapshot."""

from __future__ import annotations

import queue
import random

import pytest

from loopdefense.comms.event_bus import EventBus
from loopdefense.config import GameConfig
from loopdefense.simulation.engine import SimulationEngine
from loopdefense.simulation.intents import (
    CancelDrag,
    FinalizePlacement,
    PickTower,
    RequestDraw,
    RequestUpgrade,
    SelectTower,
    SetTowerPosition,
)
from loopdefense.simulation.state import FIGHT, PREP
from loopdefense.units import get_type


pytestmark = pytest.mark.unit


class FixedRoll(random.Random):
    """Random whose ``random()`` always returns the same roll (0.0 draws tier 1)."""

    def __init__(self, roll: float = 0.0) -> None:
        super().__init__(0)
        self._roll = roll

    def random(self) -> float:
        return self._roll


def _make_engine(roll: float = 0.0, **overrides) -> SimulationEngine:
    return SimulationEngine(EventBus(), GameConfig(**overrides), rng=FixedRoll(roll))


def _start_fight(engine: SimulationEngine) -> None:
    engine.state.phase_timer = 0.01
    engine.tick(0.05)
    assert engine.state.phase == FIGHT


def _draw_and_place(engine: SimulationEngine, x: float = 400, y: float = 400) -> int:
    assert engine.apply(RequestDraw())
    tid = engine.state.dragging_tower_id
    engine.apply(SetTowerPosition(tid, x, y))
    engine.apply(FinalizePlacement(tid))
    return tid


def _drain(q: queue.Queue) -> list[dict]:
    out = []
    while not q.empty():
        out.append(q.get_nowait())
    return out


# --------------------------------------------------------------------------
# Tick pipeline
# --------------------------------------------------------------------------

class TestTick:
    def test_dt_clamp(self):
        engine = _make_engine()
        assert engine.clamp_dt(1.0) == 0.05
        assert engine.clamp_dt(0.02) == 0.02
        assert engine.clamp_dt(-1.0) == 0.0

    def test_long_frame_advances_one_short_step(self):
        engine = _make_engine()
        engine.tick(5.0)
        assert engine.state.phase == PREP
        assert engine.state.phase_timer == pytest.approx(59.95)

    def test_negative_dt_changes_nothing(self):
        engine = _make_engine()
        engine.tick(-3.0)
        assert engine.state.phase_timer == 60
        assert engine.state.elapsed == 0

    def test_tick_count(self):
        engine = _make_engine()
        for _ in range(3):
            engine.tick(0.016)
        assert engine.tick_count == 3

    def test_prep_lasts_sixty_seconds(self):
        engine = _make_engine()
        ticks = 0
        while engine.state.phase == PREP:
            engine.tick(0.05)
            ticks += 1
            assert ticks < 2000
        assert 1199 <= ticks <= 1201
        # First enemy appears in the same frame the fight starts
        assert len(engine.state.enemies) == 1


class TestFightScenario:
    def test_first_ten_seconds_of_stage_one(self):
        engine = _make_engine(use_archetypes=False)
        _start_fight(engine)
        for _ in range(210):
            engine.tick(0.05)
        enemies = list(engine.state.enemies)
        assert len(enemies) == 11
        assert all(e.hp == e.max_hp == 15 for e in enemies)
        assert all(e.speed == 80.5 for e in enemies)
        assert enemies[0].progress == pytest.approx(80.5 * 0.05 * 211)

    def test_kill_is_credited_in_same_tick(self):
        engine = _make_engine(use_archetypes=False)
        tid = _draw_and_place(engine, 730, 70)
        _start_fight(engine)
        (enemy,) = list(engine.state.enemies)
        assert enemy.hp == 13   # tower struck on the spawn frame
        assert engine.state.gold == 90

        enemy.hp = 2
        engine.state.get_tower(tid).cooldown = 0
        engine.tick(0.05)
        assert len(engine.state.enemies) == 0
        assert engine.state.gold == 95
        assert engine.state.kills == 1


class TestGameOver:
    def _lose(self, engine: SimulationEngine) -> None:
        _start_fight(engine)
        for _ in range(400):
            engine.tick(0.05)
            if engine.state.game_over:
                return
        pytest.fail("session never ended")

    def test_reaching_max_alive_ends_the_game(self):
        engine = _make_engine(max_alive=5)
        sub = engine.event_bus.subscribe({"game_over"})
        self._lose(engine)
        assert len(engine.state.enemies) == 5
        assert engine.state.victory is False
        (event,) = _drain(sub)
        assert event["data"]["result"] == "defeat"
        assert engine.snapshot()["status"] == "Game Over: 5 enemies on the field!"

    def test_everything_freezes(self):
        engine = _make_engine(max_alive=5)
        _draw_and_place(engine, 100, 100)
        self._lose(engine)
        state = engine.state
        before = (state.stage, state.phase, state.phase_timer, state.gold, state.kills)
        progress = [e.progress for e in state.enemies]
        hp = [e.hp for e in state.enemies]
        for _ in range(100):
            engine.tick(0.05)
        assert (state.stage, state.phase, state.phase_timer, state.gold, state.kills) == before
        assert [e.progress for e in state.enemies] == progress
        assert [e.hp for e in state.enemies] == hp

    def test_draw_and_upgrade_refused(self):
        engine = _make_engine(max_alive=5)
        tid = _draw_and_place(engine)
        self._lose(engine)
        gold = engine.state.gold
        assert engine.apply(RequestDraw()) is False
        assert engine.apply(RequestUpgrade(tid)) is False
        assert engine.state.gold == gold
        assert len(engine.state.towers) == 1


class TestVictory:
    def test_clearing_last_stage(self):
        engine = _make_engine(prep_time=0.1, fight_time=0.1, stage_max=2)
        sub = engine.event_bus.subscribe({"game_over", "stage_advanced"})
        for _ in range(100):
            engine.tick(0.05)
            if engine.state.victory:
                break
        state = engine.state
        assert state.victory is True
        assert state.game_over is False
        assert state.stage == 2
        assert engine.snapshot()["status"] == "Victory! Stage 2 cleared!"
        types = [e["type"] for e in _drain(sub)]
        assert types == ["stage_advanced", "game_over"]

        alive = len(state.enemies)
        engine.tick(0.05)
        assert state.stage == 2
        assert len(state.enemies) == alive


# --------------------------------------------------------------------------
# Intents
# --------------------------------------------------------------------------

class TestDraw:
    def test_draw_spends_and_stages(self):
        engine = _make_engine()
        assert engine.apply(RequestDraw()) is True
        state = engine.state
        (tower,) = state.towers
        assert state.gold == 90
        assert (tower.x, tower.y) == (400, 400)
        assert tower.tier == 1
        assert state.dragging_tower_id == tower.tower_id
        assert state.selected_tower_id == tower.tower_id
        assert state.placing_new is True
        assert engine.snapshot()["dragging"] == {"id": tower.tower_id, "is_new": True, "valid": True}

    def test_draw_rolls_tier(self):
        engine = _make_engine(roll=0.999)
        engine.apply(RequestDraw())
        assert engine.state.towers[0].tier == 10

    def test_draw_needs_gold(self):
        engine = _make_engine(starting_gold=5)
        assert engine.apply(RequestDraw()) is False
        assert engine.state.gold == 5
        assert engine.state.towers == []

    def test_draw_allowed_during_fight(self):
        engine = _make_engine()
        _start_fight(engine)
        assert engine.apply(RequestDraw()) is True


class TestPlacement:
    def test_new_tower_dropped_outside_is_refunded(self):
        engine = _make_engine()
        engine.apply(RequestDraw())
        tid = engine.state.dragging_tower_id
        engine.apply(SetTowerPosition(tid, 30, 400))
        assert engine.snapshot()["dragging"]["valid"] is False
        engine.apply(FinalizePlacement(tid))
        state = engine.state
        assert state.towers == []
        assert state.gold == 100
        assert state.dragging_tower_id is None
        assert state.selected_tower_id is None

    def test_inner_edge_is_outside(self):
        engine = _make_engine()
        engine.apply(RequestDraw())
        tid = engine.state.dragging_tower_id
        engine.apply(SetTowerPosition(tid, 60, 400))
        engine.apply(FinalizePlacement(tid))
        assert engine.state.towers == []

    def test_new_tower_dropped_inside_stays(self):
        engine = _make_engine()
        tid = _draw_and_place(engine, 200, 650)
        tower = engine.state.get_tower(tid)
        assert (tower.x, tower.y) == (200, 650)
        assert engine.state.gold == 90
        assert engine.state.dragging_tower_id is None
        assert engine.state.placing_new is False

    def test_existing_tower_is_clamped(self):
        engine = _make_engine()
        tid = _draw_and_place(engine)
        engine.apply(SetTowerPosition(tid, 10, 790))
        assert engine.state.dragging_tower_id == tid
        assert engine.state.placing_new is False
        engine.apply(FinalizePlacement(tid))
        tower = engine.state.get_tower(tid)
        assert (tower.x, tower.y) == (70, 730)
        assert engine.state.gold == 90

    def test_non_finite_position_refused(self):
        engine = _make_engine()
        tid = _draw_and_place(engine)
        assert engine.apply(SetTowerPosition(tid, float("nan"), 100)) is False
        assert engine.apply(SetTowerPosition(tid, 100, float("inf"))) is False
        tower = engine.state.get_tower(tid)
        assert (tower.x, tower.y) == (400, 400)
        assert engine.state.dragging_tower_id is None

    def test_unknown_tower(self):
        engine = _make_engine()
        assert engine.apply(SetTowerPosition(99, 1, 1)) is False
        assert engine.apply(FinalizePlacement(99)) is False

    def test_pick_starts_drag(self):
        engine = _make_engine()
        tid = _draw_and_place(engine, 300, 300)
        assert engine.apply(PickTower(310, 305)) is True
        assert engine.state.dragging_tower_id == tid
        assert engine.state.selected_tower_id == tid
        assert engine.state.placing_new is False

    def test_pick_misses(self):
        engine = _make_engine()
        _draw_and_place(engine, 300, 300)
        engine.apply(SelectTower(None))
        assert engine.apply(PickTower(330, 300)) is False
        assert engine.state.dragging_tower_id is None
        assert engine.state.selected_tower_id is None

    def test_cancel_drag_clamps_existing(self):
        engine = _make_engine()
        tid = _draw_and_place(engine)
        engine.apply(SetTowerPosition(tid, 790, 5))
        assert engine.apply(CancelDrag()) is True
        tower = engine.state.get_tower(tid)
        assert (tower.x, tower.y) == (730, 70)
        assert engine.state.dragging_tower_id is None

    def test_cancel_drag_leaves_new_tower(self):
        engine = _make_engine()
        engine.apply(RequestDraw())
        tid = engine.state.dragging_tower_id
        engine.apply(SetTowerPosition(tid, 5, 5))
        engine.apply(CancelDrag())
        tower = engine.state.get_tower(tid)
        assert (tower.x, tower.y) == (5, 5)
        assert engine.state.gold == 90

    def test_cancel_without_drag(self):
        engine = _make_engine()
        assert engine.apply(CancelDrag()) is False


class TestSelectAndUpgrade:
    def test_select(self):
        engine = _make_engine()
        tid = _draw_and_place(engine)
        assert engine.apply(SelectTower(None)) is True
        assert engine.snapshot()["selected"] is None
        assert engine.apply(SelectTower(tid)) is True
        assert engine.snapshot()["selected"]["id"] == tid
        assert engine.apply(SelectTower(42)) is False
        assert engine.state.selected_tower_id == tid

    def test_upgrade(self):
        engine = _make_engine()
        tid = _draw_and_place(engine)
        view = engine.snapshot()["selected"]
        assert view["upgrade_cost"] == 12
        assert view["can_upgrade"] is True
        assert engine.apply(RequestUpgrade(tid)) is True
        tower = engine.state.get_tower(tid)
        assert tower.level == 1
        assert engine.state.gold == 78
        view = engine.snapshot()["selected"]
        assert view["damage"] == 3.0
        assert view["upgrade_cost"] == 17

    def test_upgrade_needs_gold(self):
        engine = _make_engine(starting_gold=20)
        tid = _draw_and_place(engine)
        assert engine.snapshot()["selected"]["can_upgrade"] is False
        assert engine.apply(RequestUpgrade(tid)) is False
        assert engine.state.get_tower(tid).level == 0
        assert engine.state.gold == 10

    def test_upgrade_unknown_tower(self):
        engine = _make_engine()
        assert engine.apply(RequestUpgrade(7)) is False
        assert engine.state.gold == 100


class TestIntentQueue:
    def test_posted_intent_applies_next_tick(self):
        engine = _make_engine()
        engine.post(RequestDraw())
        assert engine.state.towers == []
        assert engine.state.gold == 100
        engine.tick(0.0)
        assert len(engine.state.towers) == 1
        assert engine.state.gold == 90

    def test_intents_apply_in_order(self):
        engine = _make_engine()
        engine.post(RequestDraw())
        engine.post(SetTowerPosition(1, 0, 0))
        engine.post(FinalizePlacement(1))
        engine.tick(0.0)
        assert engine.state.towers == []
        assert engine.state.gold == 100


class TestGoldInvariant:
    def test_gold_never_negative(self):
        engine = SimulationEngine(EventBus(), GameConfig(prep_time=2.0, fight_time=5.0), seed=11)
        actions = random.Random(3)
        for _ in range(1500):
            choice = actions.randrange(5)
            towers = engine.state.towers
            if choice == 0:
                engine.apply(RequestDraw())
            elif choice == 1 and towers:
                engine.apply(RequestUpgrade(actions.choice(towers).tower_id))
            elif choice == 2 and towers:
                tower = actions.choice(towers)
                engine.apply(SetTowerPosition(tower.tower_id, actions.uniform(0, 800), actions.uniform(0, 800)))
                engine.apply(FinalizePlacement(tower.tower_id))
            else:
                engine.tick(0.05)
            assert engine.state.gold >= 0
            for enemy in engine.state.enemies:
                assert enemy.hp <= enemy.max_hp


# --------------------------------------------------------------------------
# Snapshot and session
# --------------------------------------------------------------------------

class TestSnapshot:
    def test_keys(self):
        engine = _make_engine()
        snap = engine.snapshot()
        assert set(snap) == {
            "stage", "stage_max", "phase", "timer", "gold", "alive", "kills",
            "game_over", "victory", "status", "towers", "enemies", "projectiles",
            "effects", "selected", "dragging",
        }
        assert snap["timer"] == 60
        assert snap["status"] == ""
        assert snap["dragging"] is None

    def test_timer_rounds_up(self):
        engine = _make_engine()
        engine.tick(0.05)
        assert engine.snapshot()["timer"] == 60
        assert engine.get_game_state()["timer"] == 60

    def test_enemy_positions(self):
        engine = _make_engine(use_archetypes=False)
        _start_fight(engine)
        (enemy,) = engine.snapshot()["enemies"]
        assert enemy["position"]["y"] == 30
        assert enemy["position"]["x"] == pytest.approx(770 - 80.5 * 0.05)
        assert enemy["hp_ratio"] == 1.0
        archetype = get_type(enemy["type"])
        assert enemy["name"] == archetype.display_name
        assert enemy["palette"] == archetype.palette()

    def test_hud_has_no_entity_lists(self):
        hud = _make_engine().get_game_state()
        assert "towers" not in hud and "enemies" not in hud
        assert hud["gold"] == 100


class TestReset:
    def test_reset_starts_over(self):
        engine = _make_engine()
        sub = engine.event_bus.subscribe({"game_reset"})
        _draw_and_place(engine)
        _start_fight(engine)
        engine.reset_game()
        state = engine.state
        assert state.stage == 1
        assert state.phase == PREP
        assert state.gold == 100
        assert state.towers == []
        assert len(state.enemies) == 0
        assert engine.tick_count == 0
        assert len(_drain(sub)) == 1

    def test_reset_clears_pending_intents(self):
        engine = _make_engine()
        engine.post(RequestDraw())
        engine.reset_game()
        engine.tick(0.0)
        assert engine.state.towers == []
