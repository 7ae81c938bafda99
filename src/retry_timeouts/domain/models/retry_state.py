"""RetryState model - mutable bookkeeping of one retry sequence"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RetryState:
    """Bookkeeping shared by the backoff engine and the retry controller.

    Owned by a single controller and not safe for concurrent use.
    """

    start_timestamp: Optional[float] = None  # Anchors the time budget
    last_timestamp: Optional[float] = None  # Unset until the first attempt is logged
    attempts: int = 0  # Every logged attempt, including ones after exhaustion
    failures: int = 0  # Consecutive failures since the last success
    last_delay: Optional[float] = None
    last_timeout: Optional[float] = None
