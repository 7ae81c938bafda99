"""Schedule models - scripted attempts and the simulated retry schedule"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from retry_timeouts.domain.models.delay import ABORT


class Outcome(str, Enum):
    """Outcome of a scripted attempt"""

    FAIL = "fail"
    OK = "ok"


@dataclass(frozen=True)
class AttemptScript:
    """A scripted attempt: its outcome and how long it takes.

    A duration of None means the attempt runs until its timeout.
    """

    outcome: Outcome
    duration: Optional[float] = None

    @classmethod
    def parse(cls, text: str) -> "AttemptScript":
        """Parse 'fail:<seconds>', 'ok:<seconds>' or 'fail:timeout'

        Raises:
            ValueError: If the text is not a valid attempt script
        """
        outcome_text, sep, duration_text = text.strip().partition(":")
        try:
            outcome = Outcome(outcome_text.lower())
        except ValueError:
            raise ValueError(
                f"Invalid attempt '{text}': outcome must be 'fail' or 'ok'"
            ) from None

        if not sep or not duration_text:
            raise ValueError(f"Invalid attempt '{text}': expected <outcome>:<seconds>")

        if duration_text.lower() == "timeout":
            return cls(outcome, None)

        try:
            duration = float(duration_text)
        except ValueError:
            raise ValueError(
                f"Invalid attempt '{text}': duration must be a number or 'timeout'"
            ) from None
        if duration < 0:
            raise ValueError(f"Invalid attempt '{text}': duration must not be negative")
        return cls(outcome, duration)


@dataclass(frozen=True)
class ScheduleEntry:
    """One simulated attempt and what the retry algorithm answered"""

    attempt: int
    outcome: Outcome
    started_at: float
    duration: float
    delay: float
    timeout: float
    # Timeout the attempt itself ran with (-1 if disabled)
    attempt_timeout: float = -1.0

    @property
    def aborted(self) -> bool:
        """Check if the algorithm told the caller to give up"""
        return self.delay == ABORT

    @property
    def finished_at(self) -> float:
        return self.started_at + self.duration
