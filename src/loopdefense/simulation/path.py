"""LoopPath — the closed rectangular track enemies walk along.

The loop sits in the middle of the track band (inset by half the band's
thickness from the board edge).  Enemies start at the top-right corner and
travel counter-clockwise on screen:

    top edge leftward -> left edge downward -> bottom edge rightward -> right edge upward

Progress is a distance along the loop; anything beyond one lap wraps.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from loopdefense.config import GameConfig


@dataclass(frozen=True)
class LoopPath:
    offset: float
    length_x: float
    length_y: float
    width: float
    height: float

    @classmethod
    def from_config(cls, config: GameConfig) -> LoopPath:
        offset = config.track_thickness / 2
        return cls(
            offset=offset,
            length_x=config.width - offset * 2,
            length_y=config.height - offset * 2,
            width=config.width,
            height=config.height,
        )

    @property
    def perimeter(self) -> float:
        return self.length_x * 2 + self.length_y * 2

    def position(self, progress: float) -> tuple[float, float]:
        """Map a progress distance to an (x, y) point on the loop."""
        p = math.fmod(progress, self.perimeter)
        if p < 0:
            p += self.perimeter
        if p < self.length_x:
            return (self.width - self.offset - p, self.offset)
        p -= self.length_x
        if p < self.length_y:
            return (self.offset, self.offset + p)
        p -= self.length_y
        if p < self.length_x:
            return (self.offset + p, self.height - self.offset)
        p -= self.length_x
        return (self.width - self.offset, self.height - self.offset - p)
