"""retry-timeouts - backoff-style retries with adjustable timeouts.

After each attempt, suggests both the delay before the next attempt and the
timeout that attempt should use, sharing one time budget between them.
"""

from retry_timeouts.application.retry_timeouts import RetryTimeouts
from retry_timeouts.domain.config import BackoffConfig, ConfigurationError, RetryTimeoutsConfig
from retry_timeouts.domain.models.delay import ABORT
from retry_timeouts.infrastructure.backoff.exponential import ExponentialBackoff

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ABORT",
    "BackoffConfig",
    "ConfigurationError",
    "ExponentialBackoff",
    "RetryTimeouts",
    "RetryTimeoutsConfig",
]
