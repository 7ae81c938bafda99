"""Drive tenacity retries with a RetryTimeouts controller.

tenacity runs the retry loop and sleeps; the controller decides how long to
wait, when to stop and which timeout the next attempt should use::

    retry = RetryTimeouts()
    adapter = TenacityAdapter(retry)
    response = adapter.retrying(reraise=True)(
        lambda: requests.get(url, timeout=adapter.timeout())
    )
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from tenacity import RetryCallState, Retrying, before_sleep_log, retry_if_exception_type

from retry_timeouts.application.retry_timeouts import RetryTimeouts
from retry_timeouts.domain.models.delay import ABORT

logger = logging.getLogger(__name__)


class TenacityAdapter:
    """after/stop/wait hooks for tenacity backed by a RetryTimeouts controller

    Every attempt tenacity retries is logged as a failure. An attempt whose
    outcome is not retried and did not raise is logged as a success, so
    ``attempts`` matches the number of calls. Exceptions that the retry
    condition rejects propagate without being logged.
    """

    def __init__(self, retry_timeouts: RetryTimeouts):
        self.retry_timeouts = retry_timeouts

    def after(self, retry_state: RetryCallState) -> None:
        """Log the failed attempt on the controller"""
        delay, timeout = self.retry_timeouts.failure()
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.debug(
            f"Attempt {retry_state.attempt_number} failed ({exception}): "
            f"delay {delay:.2f}s, next timeout {timeout:.2f}s"
        )

    def stop(self, retry_state: RetryCallState) -> bool:
        """Stop once the controller says to give up"""
        return self.retry_timeouts.delay() == ABORT

    def wait(self, retry_state: RetryCallState) -> float:
        """Wait the delay suggested after the last attempt"""
        return max(self.retry_timeouts.delay(), 0.0)

    def timeout(self) -> float:
        """Timeout the next attempt should use (-1 if disabled)"""
        return self.retry_timeouts.timeout()

    def retry_on(
        self, condition: Callable[[RetryCallState], bool]
    ) -> Callable[[RetryCallState], bool]:
        """Wrap a retry condition so that accepted results are logged as successes"""

        def should_retry(retry_state: RetryCallState) -> bool:
            if condition(retry_state):
                return True
            if not retry_state.outcome.failed:
                self.retry_timeouts.success()
                logger.debug(f"Attempt {retry_state.attempt_number} succeeded")
            return False

        return should_retry

    def retrying(self, **kwargs: Any) -> Retrying:
        """Build a tenacity.Retrying using these hooks

        Args:
            **kwargs: Extra Retrying arguments (retry, reraise, sleep, ...).
                retry defaults to retrying on any exception, as in tenacity.

        Returns:
            Retrying instance
        """
        condition = kwargs.pop("retry", retry_if_exception_type())
        kwargs.setdefault("before_sleep", before_sleep_log(logger, logging.WARNING))
        return Retrying(
            retry=self.retry_on(condition),
            after=self.after,
            stop=self.stop,
            wait=self.wait,
            **kwargs,
        )
