"""Retry configuration model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """Configuration for the patient connectivity check.

    The initial attempt is not counted as a retry, so a check makes at most
    ``max_retries + 1`` attempts. Retry ``n`` waits ``base_delay * 2**(n-1)``
    seconds, clamped to ``max_delay`` when one is set.

    Attributes:
        max_retries: Number of retries after the initial attempt
        base_delay: Wait before the first retry, in seconds
        max_delay: Optional upper bound for a single wait, in seconds (None = no bound)
    """

    max_retries: int = Field(2, ge=0)
    base_delay: float = Field(0.5, ge=0.0)  # Allow 0 for tests
    max_delay: Optional[float] = Field(None, ge=0.0)

    model_config = ConfigDict(frozen=True)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry_number: int) -> float:
        """Return the wait before retry ``retry_number`` (1-based)."""
        if retry_number < 1:
            raise ValueError(f"retry_number must be >= 1, got {retry_number}")
        delay = self.base_delay * 2 ** (retry_number - 1)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
