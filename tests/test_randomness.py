"""Tests for the pluggable random source."""

import pytest

from hackscene.randomness import StdlibRandom, coin, pick
from tests.conftest import FixedRandom, ScriptedRandom


class TestStdlibRandom:
    """Tests for StdlibRandom."""

    def test_values_stay_in_half_open_range(self):
        """uniform() should never return the upper bound."""
        rng = StdlibRandom(seed=7)

        values = [rng.uniform(5.0, 10.0) for _ in range(2000)]

        assert all(5.0 <= v < 10.0 for v in values)

    def test_negative_ranges(self):
        """Ranges below zero work the same way."""
        rng = StdlibRandom(seed=3)

        values = [rng.uniform(-768, 0) for _ in range(500)]

        assert all(-768 <= v < 0 for v in values)

    def test_seed_repeats_sequence(self):
        """Two sources with the same seed produce the same values."""
        a = StdlibRandom(seed=42)
        b = StdlibRandom(seed=42)

        assert [a.uniform(0, 1) for _ in range(10)] == [b.uniform(0, 1) for _ in range(10)]


class TestPick:
    """Tests for pick()."""

    def test_low_fraction_picks_first(self):
        assert pick(FixedRandom(0.0), ["a", "b", "c"]) == "a"

    def test_high_fraction_picks_last(self):
        assert pick(FixedRandom(0.999), ["a", "b", "c"]) == "c"

    def test_fraction_maps_to_index(self):
        """Fraction 0.5 over four items lands on index 2."""
        assert pick(FixedRandom(0.5), [10, 20, 30, 40]) == 30

    def test_out_of_range_source_is_clamped(self):
        """A source that returns the upper bound still yields a valid element."""
        assert pick(FixedRandom(1.0), ["x", "y"]) == "y"

    def test_empty_sequence_raises(self):
        with pytest.raises(IndexError):
            pick(FixedRandom(), [])


class TestCoin:
    """Tests for coin()."""

    def test_coin_values(self):
        rng = ScriptedRandom([0.9, 0.1, 0.5])

        assert coin(rng) == 1
        assert coin(rng) == -1
        assert coin(rng) == -1  # exactly 0.5 is not > 0.5
