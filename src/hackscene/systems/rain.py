"""Matrix rain: columns of binary glyphs falling across the whole surface."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from hackscene.model.rain import RainColumn

if TYPE_CHECKING:
    from hackscene.randomness import RandomSource
    from hackscene.surface.canvas import Surface

COLUMN_SPACING = 16  # px between columns
GLYPH_HEIGHT = 16  # px between glyphs in a column
EXTRA_GLYPHS = 5  # column length beyond surface height, in glyphs
WRAP_MARGIN = 100  # px below the surface before a column wraps
MIN_SPEED = 50.0
MAX_SPEED = 200.0


class MatrixRain:
    """Falling columns; pure visual noise with no links to other systems."""

    def __init__(self, width: int, height: int, rng: RandomSource) -> None:
        self.rng = rng
        self.spacing = COLUMN_SPACING
        self.columns: list[RainColumn] = []
        self.reset(width, height)

    def reset(self, width: int, height: int) -> None:
        """Rebuild one column per spacing interval across `width`."""
        self.columns = [
            RainColumn(
                x=float(x),
                y=self._spawn_y(height),
                speed=self.rng.uniform(MIN_SPEED, MAX_SPEED),
            )
            for x in range(0, width, self.spacing)
        ]

    def _spawn_y(self, height: int) -> float:
        return self.rng.uniform(-height, 0)

    def update(self, dt: float, width: int, height: int) -> None:
        """Advance every column by speed * dt.

        Args:
            dt: Seconds since the previous frame
            width: Surface width (unused; columns are rebuilt on resize)
            height: Surface height, used for the wrap threshold

        Side effects:
            - Mutates column.y; columns past height + 100 restart above the top
        """
        for column in self.columns:
            column.y += column.speed * dt
            if column.y > height + WRAP_MARGIN:
                column.y = self._spawn_y(height)

    def draw(self, surface: Surface, height: int) -> None:
        """Draw a fading trail of random 0/1 glyphs above each column head.

        The head glyph is opaque and each glyph further up is fainter. Glyphs
        are drawn fresh every frame, so the random source is consumed here.
        """
        count = math.ceil(height / GLYPH_HEIGHT) + EXTRA_GLYPHS
        for column in self.columns:
            for i in range(count):
                glyph = "1" if self.rng.uniform(0.0, 1.0) > 0.5 else "0"
                alpha = max(1.0 - i / count, 0.0)
                surface.fill_text(
                    glyph,
                    column.x,
                    column.y - i * GLYPH_HEIGHT,
                    f"rgba(0, 255, 120, {alpha:.3f})",
                    GLYPH_HEIGHT,
                )
