"""Delay model - a wait time or the signal to stop retrying"""

from dataclasses import dataclass
from typing import Optional

ABORT = -1.0  # Delay value telling the caller to give up


@dataclass(frozen=True)
class Delay:
    """Delay before the next attempt, tagged with whether the sequence is over.

    An aborted delay is never clamped or jittered. Its ``seconds`` still reads
    as ``ABORT`` so arithmetic on it matches the plain float API.
    """

    seconds: float = 0.0
    aborted: bool = False

    @classmethod
    def from_raw(cls, raw: Optional[float]) -> "Delay":
        """Build a Delay from a raw engine value (None means no delay)"""
        if raw is None:
            return cls()
        if raw == ABORT:
            return cls.abort()
        return cls(float(raw))

    @classmethod
    def abort(cls) -> "Delay":
        """The delay that ends the retry sequence"""
        return cls(ABORT, aborted=True)
