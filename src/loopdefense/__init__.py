"""Loop Defense — tower-defense simulation core."""

from loopdefense.config import GameConfig

__version__ = "0.1.0"

__all__ = ["GameConfig", "__version__"]
