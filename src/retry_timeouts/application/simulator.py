"""Dry-run simulation of a retry schedule on a virtual clock"""

import logging
import random
from typing import Iterable, List, Optional, Union

from retry_timeouts.application.retry_timeouts import RetryTimeouts
from retry_timeouts.domain.config import RetryTimeoutsConfig
from retry_timeouts.domain.models.delay import ABORT
from retry_timeouts.domain.models.schedule import AttemptScript, Outcome, ScheduleEntry

logger = logging.getLogger(__name__)


class VirtualClock:
    """Clock that only moves when told to"""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScheduleSimulator:
    """Replay scripted attempts against a retry controller without sleeping"""

    def __init__(self, config: Optional[RetryTimeoutsConfig] = None, rng: Optional[random.Random] = None):
        """Initialize simulator

        Args:
            config: Retry configuration (default: RetryTimeoutsConfig())
            rng: Random source for jitter
        """
        self.config = config or RetryTimeoutsConfig()
        self.rng = rng

    def run(self, attempts: Iterable[Union[AttemptScript, str]]) -> List[ScheduleEntry]:
        """Run scripted attempts until they run out or the algorithm gives up

        Each attempt is cut short at its timeout when timeouts are enabled.

        Args:
            attempts: Attempt scripts, or strings such as 'fail:0' or 'fail:timeout'

        Returns:
            One entry per attempt that was made

        Raises:
            ValueError: If an attempt string is malformed
        """
        scripts = [a if isinstance(a, AttemptScript) else AttemptScript.parse(a) for a in attempts]

        clock = VirtualClock()
        retry = RetryTimeouts(self.config, clock=clock, rng=self.rng)
        entries: List[ScheduleEntry] = []

        for number, script in enumerate(scripts, start=1):
            timeout = retry.timeout()
            duration = self._attempt_duration(script, timeout)
            started_at = clock()
            clock.advance(duration)

            if script.outcome == Outcome.OK:
                delay, next_timeout = retry.success()
            else:
                delay, next_timeout = retry.failure()

            entry = ScheduleEntry(
                attempt=number,
                outcome=script.outcome,
                started_at=started_at,
                duration=duration,
                delay=delay,
                timeout=next_timeout,
                attempt_timeout=timeout,
            )
            entries.append(entry)
            logger.debug(
                f"Attempt {number} ({script.outcome.value}, {duration:.2f}s): "
                f"delay {delay:.2f}s, timeout {next_timeout:.2f}s"
            )

            if delay == ABORT:
                break
            clock.advance(delay)

        return entries

    @staticmethod
    def _attempt_duration(script: AttemptScript, timeout: float) -> float:
        if timeout < 0:
            # Timeouts disabled, nothing cuts the attempt short
            return script.duration or 0.0
        if script.duration is None:
            return timeout
        return min(script.duration, timeout)


def simulate(
    config: Optional[RetryTimeoutsConfig],
    attempts: Iterable[Union[AttemptScript, str]],
    rng: Optional[random.Random] = None,
) -> List[ScheduleEntry]:
    """Simulate a retry schedule (see ScheduleSimulator.run)"""
    return ScheduleSimulator(config, rng=rng).run(attempts)
