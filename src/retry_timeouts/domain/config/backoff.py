"""Exponential backoff configuration model."""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BackoffConfig(BaseModel):
    """Configuration for the exponential backoff engine.

    Attributes:
        max_attempts: Maximum number of attempts (0 = unlimited)
        max_actual_duration: Total time budget in seconds (0 = unlimited)
        jitter_factor: Random jitter applied to delays (0.0-0.5)
        initial_delay: Delay after the first failure, in seconds
        exponent_base: Growth factor between consecutive failures
        delay_on_success: Delay returned after a successful attempt
        min_delay: Lower bound for every delay
        max_delay: Upper bound for every delay (None = unbounded)
        consider_actual_delay: Subtract the time an attempt took from the next delay
    """

    max_attempts: int = Field(8, ge=0)
    max_actual_duration: float = Field(50.0, ge=0.0)
    jitter_factor: float = Field(0.1, ge=0.0, le=0.5)
    initial_delay: float = Field(math.sqrt(2), ge=0.0)
    exponent_base: float = Field(math.sqrt(2), ge=0.0)
    delay_on_success: float = Field(0.0, ge=0.0)
    min_delay: float = Field(0.0, ge=0.0)
    max_delay: Optional[float] = Field(None, ge=0.0)
    consider_actual_delay: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "BackoffConfig":
        if self.max_delay is not None and self.max_delay < self.min_delay:
            raise ValueError("max_delay must be greater than or equal to min_delay")
        return self
