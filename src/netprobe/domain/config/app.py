"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from netprobe.domain.config.endpoint import EndpointConfig
from netprobe.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation is performed
    at load time to fail fast on configuration errors, and the result is
    frozen: configuration is read-only once the process has started.

    Attributes:
        endpoint: Target endpoint and per-attempt timeout
        retry: Backoff policy for the patient check
    """

    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "endpoint": {
                    "host": "example.com",
                    "port": 443,
                    "timeout": 2.0,
                },
                "retry": {
                    "max_retries": 2,
                    "base_delay": 0.5,
                    "max_delay": None,
                },
            }
        },
    )

    def worst_case_duration(self) -> float:
        """Upper bound, in seconds, on the duration of a patient check.

        Every attempt times out and every backoff wait is taken in full.
        """
        attempts = self.retry.max_attempts * self.endpoint.timeout
        waits = sum(self.retry.delay_for(n) for n in range(1, self.retry.max_retries + 1))
        return attempts + waits
