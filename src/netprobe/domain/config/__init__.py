"""Configuration models with Pydantic validation."""

from netprobe.domain.config.app import AppConfig
from netprobe.domain.config.endpoint import EndpointConfig
from netprobe.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "EndpointConfig",
    "RetryConfig",
]
