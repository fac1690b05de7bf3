"""Endpoint configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class EndpointConfig(BaseModel):
    """Target of the connectivity check.

    Attributes:
        host: Host name or IP address to connect to
        port: TCP port to connect to
        timeout: Time budget for a single connection attempt, in seconds
    """

    host: str = Field("example.com", min_length=1)
    port: int = Field(443, ge=1, le=65535)
    timeout: float = Field(2.0, gt=0.0)

    model_config = ConfigDict(frozen=True)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"
