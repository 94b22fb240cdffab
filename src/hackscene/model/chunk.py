"""CodeChunk dataclass: a drifting, fading panel of code text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ChunkState(Enum):
    """Fade lifecycle of a code chunk."""

    FADE_IN = "fadeIn"
    HOLD = "hold"
    FADE_OUT = "fadeOut"


@dataclass
class CodeChunk:
    """A multi-line snippet drifting horizontally across the surface.

    There is no terminal state: once faded out, the chunk keeps drifting until
    it is both invisible and off screen, then its system drops it.
    """

    x: float
    y: float
    direction: int  # +1 drifts right, -1 drifts left
    speed: float
    lines: tuple[str, ...]
    alpha: float = 0.0
    state: ChunkState = ChunkState.FADE_IN
    hold_time: float = 0.0

    def is_dead(self, width: float, margin: float = 400.0) -> bool:
        """Invisible AND beyond the horizontal margin on either side."""
        return self.alpha <= 0.0 and (self.x < -margin or self.x > width + margin)
