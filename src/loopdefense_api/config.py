"""Configuration management using Pydantic settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from loopdefense.config import GameConfig

# Settings fields that are forwarded into GameConfig when set
GAME_FIELDS = (
    "prep_time", "fight_time", "stage_max", "starting_gold", "draw_cost",
    "kill_reward", "max_alive", "max_frame_dt", "use_archetypes", "splash_hits_primary",
)


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "LOOP DEFENSE"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Frame pacing
    tick_hz: float = 60.0        # simulation frames per second
    broadcast_hz: float = 20.0   # WebSocket snapshots per second

    # Session
    rng_seed: Optional[int] = None

    # Game tuning overrides (None = GameConfig default)
    prep_time: Optional[float] = None
    fight_time: Optional[float] = None
    stage_max: Optional[int] = None
    starting_gold: Optional[int] = None
    draw_cost: Optional[int] = None
    kill_reward: Optional[int] = None
    max_alive: Optional[int] = None
    max_frame_dt: Optional[float] = None
    use_archetypes: Optional[bool] = None
    splash_hits_primary: Optional[bool] = None

    def game_config(self) -> GameConfig:
        """Build the GameConfig, applying any overrides set in the environment."""
        overrides = {
            name: getattr(self, name)
            for name in GAME_FIELDS
            if getattr(self, name) is not None
        }
        return GameConfig(**overrides)


settings = Settings()
