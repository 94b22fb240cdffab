"""Packet dataclass: a marker traveling along a link."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hackscene.model.node import Link

# Progress per second is speed / PROGRESS_DIVISOR. `speed` is a tuned rate
# constant, not pixels per second.
PROGRESS_DIVISOR = 1000.0


@dataclass(eq=False)
class Packet:
    """A packet moving from link.source (t=0) to link.dest (t=1)."""

    link: Link
    color: str
    speed: float = 120.0
    t: float = 0.0

    def advance(self, dt: float) -> None:
        self.t += (self.speed * dt) / PROGRESS_DIVISOR

    @property
    def done(self) -> bool:
        return self.t >= 1.0

    @property
    def progress(self) -> float:
        """Progress clamped to [0, 1] for drawing."""
        return min(1.0, max(0.0, self.t))

    def position(self) -> tuple[float, float]:
        return self.link.point_at(self.progress)
