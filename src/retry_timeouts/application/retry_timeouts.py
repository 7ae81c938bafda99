"""Retry controller with adjustable timeouts.

Combines exponential backoff with a per-attempt timeout derived from the
time left in the budget. After every attempt the caller gets both how long to
wait and how long the next attempt may run::

    retry = RetryTimeouts()
    timeout = retry.timeout()
    while True:
        ok = do_the_thing(timeout=timeout)
        delay, timeout = retry.success() if ok else retry.failure()
        if ok:
            break
        if delay == ABORT:
            raise RuntimeError("Ran out of time")
        time.sleep(delay)

With the defaults, the initial timeout is 25s. An attempt that fails
instantly is followed by a ~1.4s delay and a ~24.3s timeout, the next one by
~2s and ~23.3s. An attempt that uses its whole timeout leaves no delay and
half of the remaining time as the next timeout.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Optional, Tuple

from pydantic import ValidationError

from retry_timeouts.application.timeout_adjuster import TimeoutAdjuster
from retry_timeouts.domain.config import ConfigurationError, RetryTimeoutsConfig, format_validation_error
from retry_timeouts.domain.models.delay import ABORT
from retry_timeouts.domain.models.retry_state import RetryState
from retry_timeouts.infrastructure.backoff.exponential import ExponentialBackoff
from retry_timeouts.infrastructure.jitter import Jitter

logger = logging.getLogger(__name__)


class RetryTimeouts:
    """Backoff-style retry algorithm with adjustable timeout support

    Not thread-safe: use one instance per retry sequence, from one caller.
    """

    def __init__(
        self,
        config: Optional[RetryTimeoutsConfig] = None,
        *,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        **options: Any,
    ):
        """Initialize retry controller and start the budget timer

        Args:
            config: Retry configuration (default: RetryTimeoutsConfig())
            clock: Source of the current time, in seconds
            rng: Random source for jitter (defaults to the module-level generator)
            **options: Configuration fields overriding those of config

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self._config = _build_config(config, options)
        self._clock = clock
        self.state = RetryState(start_timestamp=clock())

        jitter = Jitter(rng)
        self._engine = ExponentialBackoff(
            self._config.backoff_config(),
            self.state,
            previous_delay=self.delay,
            jitter=jitter,
        )
        self._adjuster = TimeoutAdjuster(self._config, self.state, jitter)
        self._exhausted = False

    @property
    def config(self) -> RetryTimeoutsConfig:
        return self._config

    @property
    def attempts(self) -> int:
        """Number of attempts logged so far"""
        return self.state.attempts

    @property
    def start_timestamp(self) -> Optional[float]:
        return self.state.start_timestamp

    @property
    def last_timestamp(self) -> Optional[float]:
        return self.state.last_timestamp

    def success(self, timestamp: Optional[float] = None) -> Tuple[float, float]:
        """Log a successful attempt

        Args:
            timestamp: When the attempt finished (defaults to now)

        Returns:
            Tuple of (delay, timeout) for the next attempt
        """
        return self._log_attempt(True, timestamp)

    def failure(self, timestamp: Optional[float] = None) -> Tuple[float, float]:
        """Log a failed attempt

        Args:
            timestamp: When the attempt finished (defaults to now)

        Returns:
            Tuple of (delay, timeout) for the next attempt. A delay of -1 means
            max_attempts or max_actual_duration was reached and the caller should
            give up.
        """
        return self._log_attempt(False, timestamp)

    def delay(self) -> float:
        """Last suggested delay, in seconds (-1 means give up)"""
        if self.state.last_delay is None:
            return 0.0
        return self.state.last_delay

    def timeout(self) -> float:
        """Last suggested timeout, in seconds

        If no attempt has been logged yet, suggests an initial timeout. Returns
        -1 if max_actual_duration is 0 (timeouts disabled).
        """
        if self.state.last_timeout is not None:
            return self.state.last_timeout
        return self._adjuster.initial_timeout()

    def _log_attempt(self, is_success: bool, timestamp: Optional[float]) -> Tuple[float, float]:
        if timestamp is None:
            timestamp = self._clock()

        # Anchor the first attempt at the start so its own duration does not
        # count as time already waited
        if self.state.last_timestamp is None:
            self.state.last_timestamp = self.state.start_timestamp

        if is_success:
            raw_delay = self._engine.success(timestamp)
        else:
            raw_delay = self._engine.failure(timestamp)

        delay, timeout = self._adjuster.adjust(raw_delay, timestamp)
        if timeout is None:
            timeout = self.timeout()

        if delay == ABORT:
            # The engine stops counting once exhausted
            self.state.attempts += 1
            self.state.last_timestamp = timestamp
            if not self._exhausted:
                self._exhausted = True
                logger.info(
                    f"Retry budget exhausted after {self.state.attempts} attempts "
                    f"({timestamp - self.state.start_timestamp:.1f}s elapsed)"
                )

        return delay, timeout


def _build_config(config: Optional[RetryTimeoutsConfig], options: dict) -> RetryTimeoutsConfig:
    """Merge keyword options over a config and validate the result"""
    if config is not None and not options:
        return config

    values = config.model_dump() if config is not None else {}
    values.update(options)
    try:
        return RetryTimeoutsConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(format_validation_error(e, "Invalid retry configuration")) from e
