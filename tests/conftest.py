"""Shared fixtures: scripted random sources and recording surfaces."""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from hackscene.surface.canvas import RecordingSurface


class FixedRandom:
    """RandomSource that always lands at the same fraction of the range."""

    def __init__(self, fraction: float = 0.5) -> None:
        self.fraction = fraction
        self.calls: list[tuple[float, float]] = []

    def uniform(self, low: float, high: float) -> float:
        self.calls.append((low, high))
        return low + (high - low) * self.fraction


class ScriptedRandom:
    """RandomSource replaying fractions in order, then falling back to a default."""

    def __init__(self, fractions: Iterable[float], default: float = 0.5) -> None:
        self.fractions = list(fractions)
        self.default = default

    def uniform(self, low: float, high: float) -> float:
        fraction = self.fractions.pop(0) if self.fractions else self.default
        return low + (high - low) * fraction


@pytest.fixture
def fixed_rng() -> FixedRandom:
    return FixedRandom(0.5)


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface(1024, 768)
