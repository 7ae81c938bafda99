"""Timeout adjustment - split the remaining time budget between delay and timeout"""

import logging
from typing import Optional, Tuple

from retry_timeouts.domain.config import RetryTimeoutsConfig
from retry_timeouts.domain.models.delay import Delay
from retry_timeouts.domain.models.retry_state import RetryState
from retry_timeouts.infrastructure.jitter import Jitter

logger = logging.getLogger(__name__)

DISABLED_TIMEOUT = -1.0


class TimeoutAdjuster:
    """Derive the actual delay and the next attempt's timeout from the time left"""

    def __init__(
        self,
        config: RetryTimeoutsConfig,
        state: RetryState,
        jitter: Optional[Jitter] = None,
    ):
        """Initialize timeout adjuster

        Args:
            config: Retry configuration
            state: Retry state to read the budget anchor from and record results in
            jitter: Jitter applicator for timeouts
        """
        self.config = config
        self.state = state
        self.jitter = jitter or Jitter()

    def adjust(self, raw_delay: Optional[float], timestamp: Optional[float] = None) -> Tuple[float, float]:
        """Clamp a raw delay to the remaining budget and compute the next timeout

        Args:
            raw_delay: Delay from the backoff engine, or ABORT
            timestamp: When the attempt was logged (defaults to the last logged attempt)

        Returns:
            Tuple of (delay, timeout). Timeout is -1 if timeouts are disabled.
        """
        delay = Delay.from_raw(raw_delay)
        start = self.state.start_timestamp
        if not self.config.max_actual_duration or start is None:
            self.state.last_delay = delay.seconds
            return delay.seconds, DISABLED_TIMEOUT

        if timestamp is None:
            timestamp = self.state.last_timestamp if self.state.last_timestamp is not None else start

        factor = self.config.adjust_timeout_factor
        time_left = self.config.max_actual_duration - (timestamp - start)

        # Leave room for the timeout after waiting
        max_delay = time_left * (1 - factor)
        if not delay.aborted and delay.seconds > max_delay:
            delay = Delay(max_delay)

        # An aborted delay still subtracts -1 here, adding a second to the timeout
        timeout = (time_left - delay.seconds) * factor
        timeout = self._finalize(timeout)

        logger.debug(
            f"Time left {time_left:.3f}s: delay {delay.seconds:.3f}s, timeout {timeout:.3f}s"
        )
        self.state.last_delay = delay.seconds
        self.state.last_timeout = timeout
        return delay.seconds, timeout

    def initial_timeout(self) -> float:
        """Timeout for an attempt made with the whole budget still available

        Returns:
            Suggested timeout, or -1 if timeouts are disabled
        """
        if not self.config.max_actual_duration:
            return DISABLED_TIMEOUT
        return self._finalize(self.config.max_actual_duration * self.config.adjust_timeout_factor)

    def _finalize(self, timeout: float) -> float:
        """Apply timeout jitter, then the minimum timeout"""
        if self.config.timeout_jitter_factor:
            timeout = self.jitter.apply(timeout, self.config.timeout_jitter_factor)
        if self.config.min_adjust_timeout > timeout:
            timeout = self.config.min_adjust_timeout
        return timeout
