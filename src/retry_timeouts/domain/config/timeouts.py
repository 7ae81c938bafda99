"""Adjustable timeout configuration model."""

from pydantic import Field

from retry_timeouts.domain.config.backoff import BackoffConfig


class RetryTimeoutsConfig(BackoffConfig):
    """Backoff configuration extended with adjustable timeout settings.

    Attributes:
        adjust_timeout_factor: Share of the time left given to the next timeout (0.0-1.0)
        min_adjust_timeout: Minimum timeout in seconds; may exceed max_actual_duration
        timeout_jitter_factor: Random jitter applied to timeouts (0.0-0.5)
    """

    adjust_timeout_factor: float = Field(0.5, ge=0.0, le=1.0)
    min_adjust_timeout: float = Field(5.0, ge=0.0)
    timeout_jitter_factor: float = Field(0.1, ge=0.0, le=0.5)

    @property
    def timeouts_enabled(self) -> bool:
        """Check if adjustable timeouts are in effect"""
        return self.max_actual_duration > 0

    def backoff_config(self) -> BackoffConfig:
        """Return only the options understood by the backoff engine"""
        return BackoffConfig(**self.model_dump(include=set(BackoffConfig.model_fields)))
