"""Exponential backoff engine.

Computes the raw delay after each attempt and decides when a retry sequence
is exhausted, either by attempt count or by total duration. Exhaustion is
reported with the ABORT delay rather than an exception.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

from retry_timeouts.domain.config import BackoffConfig
from retry_timeouts.domain.models.delay import ABORT
from retry_timeouts.domain.models.retry_state import RetryState
from retry_timeouts.infrastructure.jitter import Jitter

logger = logging.getLogger(__name__)


class ExponentialBackoff:
    """Exponential backoff with attempt and duration limits"""

    def __init__(
        self,
        config: Optional[BackoffConfig] = None,
        state: Optional[RetryState] = None,
        *,
        previous_delay: Optional[Callable[[], float]] = None,
        jitter: Optional[Jitter] = None,
    ):
        """Initialize backoff engine

        Args:
            config: Backoff configuration (default: BackoffConfig())
            state: Shared retry state (a new one starting now if None)
            previous_delay: Returns the delay the caller actually waited after the
                previous attempt. Defaults to the last delay this engine returned.
            jitter: Jitter applicator for delays
        """
        self.config = config or BackoffConfig()
        self.state = state or RetryState(start_timestamp=time.time())
        self.jitter = jitter or Jitter()
        self._previous_delay = previous_delay or self._own_last_delay
        self._last_delay: Optional[float] = None

    def success(self, timestamp: Optional[float] = None) -> float:
        """Log a successful attempt and return the delay before the next one"""
        return self._log_attempt(True, timestamp)

    def failure(self, timestamp: Optional[float] = None) -> float:
        """Log a failed attempt and return the delay before the next one"""
        return self._log_attempt(False, timestamp)

    def is_exhausted(self, timestamp: float) -> bool:
        """Check if no further attempt is allowed at this timestamp

        The attempt being logged counts, so max_attempts=1 allows no retries.
        """
        max_attempts = self.config.max_attempts
        if max_attempts and self.state.attempts + 1 >= max_attempts:
            return True

        max_duration = self.config.max_actual_duration
        start = self.state.start_timestamp
        if max_duration and start is not None and timestamp - start >= max_duration:
            return True

        return False

    def _log_attempt(self, is_success: bool, timestamp: Optional[float]) -> float:
        if timestamp is None:
            timestamp = time.time()

        if self.is_exhausted(timestamp):
            logger.debug(
                f"Backoff exhausted after {self.state.attempts} attempts "
                f"at t={timestamp:.3f}"
            )
            return ABORT

        state = self.state
        if state.last_timestamp is None:
            state.last_timestamp = timestamp

        state.attempts += 1
        if is_success:
            state.failures = 0
            delay = self.config.delay_on_success
        else:
            state.failures += 1
            delay = self._failure_delay()

        if self.config.consider_actual_delay:
            delay = self._consider_actual_delay(delay, timestamp)

        delay = self._clamp(self.jitter.apply(delay, self.config.jitter_factor))

        logger.debug(
            f"Attempt {state.attempts} {'succeeded' if is_success else 'failed'}, "
            f"raw delay {delay:.3f}s"
        )
        self._last_delay = delay
        state.last_timestamp = timestamp
        return delay

    def _failure_delay(self) -> float:
        """initial_delay * exponent_base^(failures - 1), saturating at infinity"""
        if not self.config.initial_delay:
            return 0.0
        try:
            growth = self.config.exponent_base ** (self.state.failures - 1)
        except OverflowError:
            growth = math.inf
        return self.config.initial_delay * growth

    def _consider_actual_delay(self, delay: float, timestamp: float) -> float:
        """Subtract the time the attempt itself took from the delay"""
        elapsed = timestamp - self.state.last_timestamp
        if elapsed < 0:
            logger.warning(
                f"Decreasing timestamp ({self.state.last_timestamp} -> {timestamp}), "
                "treating as no elapsed time"
            )
            elapsed = 0.0
        attempt_time = elapsed - self._previous_delay()
        return delay - attempt_time

    def _clamp(self, delay: float) -> float:
        """Keep delay between max(0, min_delay) and max_delay"""
        if self.config.max_delay is not None and delay > self.config.max_delay:
            delay = self.config.max_delay
        if delay < 0:
            delay = 0.0
        if delay < self.config.min_delay:
            delay = self.config.min_delay
        return delay

    def _own_last_delay(self) -> float:
        return self._last_delay or 0.0
