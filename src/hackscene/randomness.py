"""Pluggable random source shared by every scene subsystem."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything that can produce a uniform float in [low, high)."""

    def uniform(self, low: float, high: float) -> float: ...


class StdlibRandom:
    """RandomSource backed by a private random.Random instance."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def uniform(self, low: float, high: float) -> float:
        # random.uniform may return `high`; keep the range half-open
        return low + (high - low) * self._rng.random()


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    """Choose one element uniformly.

    Raises:
        IndexError: If items is empty.
    """
    if not items:
        raise IndexError("cannot pick from an empty sequence")
    index = int(rng.uniform(0, len(items)))
    return items[min(index, len(items) - 1)]


def coin(rng: RandomSource) -> int:
    """Return +1 or -1 with equal probability."""
    return 1 if rng.uniform(0.0, 1.0) > 0.5 else -1
