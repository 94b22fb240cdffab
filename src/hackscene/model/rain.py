"""RainColumn dataclass: one falling column of binary glyphs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RainColumn:
    """A glyph column at fixed x whose leading edge falls at `speed` px/s."""

    x: float
    y: float
    speed: float
