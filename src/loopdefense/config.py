"""Game tuning constants.

GameConfig is the single source of every number the simulation reads:
board geometry, phase timings, economy, projectile ballistics and the
loss threshold.  It is immutable once built; the service layer builds one
from environment-backed settings, tests build their own.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GameConfig(BaseModel):
    """Immutable tuning for one game session."""

    model_config = ConfigDict(frozen=True)

    # Board (pixels).  The path runs through the middle of the track band.
    width: float = 800.0
    height: float = 800.0
    track_thickness: float = 60.0
    placement_margin: float = 10.0  # clamp inset from the inner border
    pick_radius: float = 14.0       # pointer hit radius for towers

    # Phases (seconds)
    prep_time: float = 60.0
    fight_time: float = 60.0
    stage_max: int = Field(default=100, ge=1)

    # Spawning
    spawn_window: float = 30.0    # normal enemies only spawn this far into a fight
    spawn_interval: float = 1.0
    boss_every: int = Field(default=10, ge=1)
    boss_delay: float = 5.0

    # Economy
    starting_gold: int = Field(default=100, ge=0)
    draw_cost: int = Field(default=10, ge=0)
    kill_reward: int = Field(default=5, ge=0)

    # Loss threshold
    max_alive: int = Field(default=100, ge=1)

    # Frame pacing
    max_frame_dt: float = Field(default=0.05, gt=0)

    # Ballistics
    fast_projectile_speed: float = 420.0
    fast_projectile_size: float = 3.0
    splash_projectile_speed: float = 320.0
    splash_projectile_size: float = 5.0
    splash_radius: float = 40.0
    splash_factor: float = 0.6
    impact_epsilon: float = 4.0
    effect_life: float = 0.12

    # Behaviour toggles
    use_archetypes: bool = True
    splash_hits_primary: bool = True

    @property
    def inner_start(self) -> float:
        return self.track_thickness

    @property
    def inner_end(self) -> float:
        return self.width - self.track_thickness

    @property
    def staging_position(self) -> tuple[float, float]:
        """Where freshly drawn towers appear: the centre of the inner area."""
        mid = (self.inner_start + self.inner_end) / 2
        return (mid, mid)


DEFAULT_CONFIG = GameConfig()
