"""Configuration models with Pydantic validation."""

from retry_timeouts.domain.config.app import AppConfig
from retry_timeouts.domain.config.backoff import BackoffConfig
from retry_timeouts.domain.config.errors import ConfigurationError, format_validation_error
from retry_timeouts.domain.config.timeouts import RetryTimeoutsConfig

__all__ = [
    "AppConfig",
    "BackoffConfig",
    "RetryTimeoutsConfig",
    "ConfigurationError",
    "format_validation_error",
]
