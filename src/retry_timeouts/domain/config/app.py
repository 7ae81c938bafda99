"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from retry_timeouts.domain.config.timeouts import RetryTimeoutsConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model of a .retry-timeouts.yml file. Validation is performed at load
    time to fail fast on configuration errors.

    Attributes:
        retry: Backoff and adjustable timeout configuration
    """

    retry: RetryTimeoutsConfig = Field(default_factory=RetryTimeoutsConfig)

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown sections
        json_schema_extra={
            "example": {
                "retry": {
                    "max_attempts": 8,
                    "max_actual_duration": 50,
                    "jitter_factor": 0.1,
                    "timeout_jitter_factor": 0.1,
                    "adjust_timeout_factor": 0.5,
                    "min_adjust_timeout": 5,
                },
            }
        },
    )
