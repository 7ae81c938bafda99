"""Tests for the retry controller - behavior focused."""

import logging
import math
import random

import pytest

from retry_timeouts import ABORT, ConfigurationError, RetryTimeouts, RetryTimeoutsConfig

SQRT2 = math.sqrt(2)


@pytest.fixture
def retry(clock):
    """Controller with default settings, no jitter, started at t=0"""
    return RetryTimeouts(jitter_factor=0, timeout_jitter_factor=0, clock=clock)


class TestConstruction:
    """Test RetryTimeouts construction."""

    def test_default_config(self, clock):
        """Defaults match RetryTimeoutsConfig"""
        retry = RetryTimeouts(clock=clock)
        assert retry.config == RetryTimeoutsConfig()

    def test_options_override_config(self, clock):
        """Keyword options win over the given config"""
        config = RetryTimeoutsConfig(max_attempts=3, min_adjust_timeout=1)

        retry = RetryTimeouts(config, max_attempts=5, clock=clock)

        assert retry.config.max_attempts == 5
        assert retry.config.min_adjust_timeout == 1

    def test_config_is_used_as_is(self, clock):
        """A config without overrides is not copied"""
        config = RetryTimeoutsConfig()
        assert RetryTimeouts(config, clock=clock).config is config

    def test_invalid_option_raises_configuration_error(self, clock):
        """Out-of-range options are rejected at construction"""
        with pytest.raises(ConfigurationError, match="adjust_timeout_factor"):
            RetryTimeouts(adjust_timeout_factor=1.5, clock=clock)

    def test_unknown_option_raises_configuration_error(self, clock):
        """Unknown options are rejected at construction"""
        with pytest.raises(ConfigurationError, match="max_retries"):
            RetryTimeouts(max_retries=3, clock=clock)

    def test_budget_starts_at_construction(self, clock):
        """The start timestamp comes from the clock"""
        clock.advance(100)
        retry = RetryTimeouts(clock=clock)

        assert retry.start_timestamp == 100
        assert retry.last_timestamp is None
        assert retry.attempts == 0


class TestAccessors:
    """Test delay() and timeout() before and after attempts."""

    def test_initial_values(self, retry):
        """Before any attempt: no delay, timeout is half the budget"""
        assert retry.delay() == 0
        assert retry.timeout() == 25

    def test_initial_timeout_respects_minimum(self, clock):
        """Initial timeout is max(duration * factor, min_adjust_timeout)"""
        retry = RetryTimeouts(
            max_actual_duration=8, timeout_jitter_factor=0, clock=clock
        )
        assert retry.timeout() == 5

    def test_accessors_mirror_last_result(self, retry):
        """delay() and timeout() repeat what the last attempt returned"""
        delay, timeout = retry.failure(3)

        assert retry.delay() == delay
        assert retry.timeout() == timeout
        assert retry.timeout() == timeout

    def test_jittered_timeout_is_stable_between_attempts(self, clock):
        """A jittered timeout is computed once per attempt"""
        retry = RetryTimeouts(timeout_jitter_factor=0.5, rng=random.Random(3), clock=clock)

        _, timeout = retry.failure(1)

        assert [retry.timeout() for _ in range(5)] == [timeout] * 5

    def test_initial_timeout_is_a_preview(self, clock):
        """Asking for the initial timeout does not fix it"""
        retry = RetryTimeouts(timeout_jitter_factor=0.5, rng=random.Random(3), clock=clock)

        previews = {retry.timeout() for _ in range(10)}

        assert len(previews) > 1
        assert all(12.5 <= t <= 37.5 for t in previews)


class TestTypicalScenario:
    """Test the documented default scenario (jitter disabled)."""

    def test_scenario(self, retry, clock):
        """Two instant failures, one timeout, then success"""
        assert retry.timeout() == 25

        # 1st attempt fails instantly
        delay, timeout = retry.failure()
        assert delay == pytest.approx(SQRT2)
        assert timeout == pytest.approx(24.29, abs=0.01)
        clock.advance(delay)

        # 2nd attempt fails instantly
        delay, timeout = retry.failure()
        assert delay == pytest.approx(2.0)
        assert timeout == pytest.approx(23.29, abs=0.01)
        clock.advance(delay)

        # 3rd attempt uses up its whole timeout
        clock.advance(timeout)
        delay, timeout = retry.failure()
        assert delay == 0
        assert timeout == pytest.approx(11.65, abs=0.01)

        # 4th attempt succeeds after 1s
        clock.advance(1)
        delay, timeout = retry.success()
        assert delay == 0
        assert timeout == pytest.approx(11.15, abs=0.01)
        assert retry.attempts == 4

    def test_first_attempt_duration_shortens_delay(self, retry):
        """A slow first attempt counts against the first delay"""
        delay, timeout = retry.failure(1)

        assert delay == pytest.approx(SQRT2 - 1)
        assert timeout == pytest.approx((49 - (SQRT2 - 1)) / 2)

    def test_first_attempt_anchored_at_start(self, retry):
        """The first attempt is measured from the start, not from itself"""
        retry.failure(1)
        assert retry.last_timestamp == 1

    def test_timeout_floors_near_budget_end(self, retry):
        """Near the end of the budget the timeout falls back to the minimum"""
        delay, timeout = retry.failure(45)

        assert delay == 0
        assert timeout == 5

    def test_gives_up_after_budget(self, retry):
        """Past max_actual_duration the delay is -1"""
        retry.failure(10)
        delay, timeout = retry.failure(51)

        assert delay == ABORT
        assert timeout == 5
        assert retry.delay() == ABORT


class TestExhaustion:
    """Test bookkeeping once the retry sequence is exhausted."""

    def test_attempts_count_every_call(self, retry):
        """attempts == N after N calls, exhausted or not"""
        timestamps = [0, 1, 2, 60, 61, 62]
        for ts in timestamps:
            retry.failure(ts)

        assert retry.attempts == len(timestamps)
        assert retry.last_timestamp == 62

    def test_abort_is_sticky(self, clock):
        """Once -1 is returned, every later call returns -1"""
        retry = RetryTimeouts(max_attempts=3, jitter_factor=0, timeout_jitter_factor=0, clock=clock)

        results = [retry.failure(t)[0] for t in range(6)]
        results.append(retry.success(7)[0])

        assert ABORT not in results[:2]
        assert results[2:] == [ABORT] * 5
        assert retry.attempts == 7

    def test_abort_timeout_includes_extra_second(self, clock):
        """The abort delay counts as -1s when computing the timeout"""
        retry = RetryTimeouts(max_attempts=1, jitter_factor=0, timeout_jitter_factor=0, clock=clock)

        delay, timeout = retry.failure(10)

        assert delay == ABORT
        assert timeout == pytest.approx(20.5)
        assert retry.timeout() == timeout
        assert retry.attempts == 1
        assert retry.last_timestamp == 10

    def test_exhaustion_logged_once(self, clock, caplog):
        """Giving up is logged at INFO only the first time"""
        retry = RetryTimeouts(max_attempts=1, clock=clock)

        with caplog.at_level(logging.INFO, logger="retry_timeouts"):
            retry.failure(1)
            retry.failure(2)

        messages = [r.message for r in caplog.records if "exhausted after" in r.message]
        assert len(messages) == 1
        assert "Retry budget exhausted after 1 attempts" in messages[0]


class TestDisabledTimeouts:
    """Test max_actual_duration=0."""

    def test_timeout_always_disabled(self, clock):
        """timeout() is -1 before and after attempts"""
        retry = RetryTimeouts(
            max_actual_duration=0, initial_delay=1000, consider_actual_delay=False, clock=clock
        )
        assert retry.timeout() == -1

        delay, timeout = retry.failure(5000)

        assert timeout == -1
        assert retry.timeout() == -1
        assert 900 <= delay <= 1100
        assert retry.delay() == delay

    def test_long_unlimited_sequence_keeps_answering(self, clock):
        """Unlimited attempts and duration never make failure() raise"""
        retry = RetryTimeouts(
            max_attempts=0,
            max_actual_duration=0,
            max_delay=60,
            jitter_factor=0,
            consider_actual_delay=False,
            clock=clock,
        )

        for n in range(1, 3001):
            delay, timeout = retry.failure(n)

        assert (delay, timeout) == (60, -1)
        assert retry.attempts == 3000


class TestBudgetConservation:
    """Test delay + timeout against the time left."""

    def test_instant_failures_stay_within_budget(self, retry, clock):
        """Every suggestion fits in the remaining budget plus the minimum timeout"""
        while True:
            delay, timeout = retry.failure()
            if delay == ABORT:
                break
            time_left = 50 - clock()
            assert delay + timeout <= time_left + retry.config.min_adjust_timeout + 1e-9
            clock.advance(delay + 0.5)

        assert retry.attempts == 8
