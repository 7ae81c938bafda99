"""Tests for jitter - behavior focused."""

import math
import random
from unittest.mock import Mock

import pytest

from retry_timeouts.infrastructure.jitter import Jitter


class TestJitter:
    """Test jitter application behavior."""

    def test_result_stays_within_bounds(self):
        """Jittered values stay within +/-factor of the quantity"""
        jitter = Jitter(random.Random(42))

        values = [jitter.apply(10.0, 0.1) for _ in range(200)]

        assert all(9.0 <= v <= 11.0 for v in values)
        assert len(set(values)) > 1

    def test_zero_factor_returns_quantity(self):
        """No jitter when factor is zero"""
        assert Jitter().apply(10.0, 0) == 10.0

    def test_zero_quantity_returns_zero(self):
        """Zero is never jittered"""
        assert Jitter().apply(0.0, 0.5) == 0.0

    def test_negative_quantity_is_unchanged(self):
        """Non-positive quantities are never jittered"""
        assert Jitter().apply(-3.0, 0.5) == -3.0

    def test_infinite_quantity_is_unchanged(self):
        """Infinity is passed through rather than turned into nan"""
        assert Jitter(random.Random(1)).apply(math.inf, 0.5) == math.inf

    def test_seeded_generator_is_reproducible(self):
        """Same seed gives the same sequence"""
        a = Jitter(random.Random(7))
        b = Jitter(random.Random(7))

        assert [a.apply(5.0, 0.5) for _ in range(5)] == [b.apply(5.0, 0.5) for _ in range(5)]

    def test_uses_extremes_of_the_range(self):
        """A sample of 0 maps to the low end, 1 to the high end"""
        low = Jitter(Mock(random=Mock(return_value=0.0)))
        high = Jitter(Mock(random=Mock(return_value=1.0)))

        assert low.apply(10.0, 0.5) == pytest.approx(5.0)
        assert high.apply(10.0, 0.5) == pytest.approx(15.0)

    def test_defaults_to_module_random(self, monkeypatch):
        """Without an injected generator the global one is used"""
        monkeypatch.setattr(random, "random", lambda: 0.5)

        assert Jitter().apply(10.0, 0.2) == pytest.approx(10.0)
