"""Single-attempt TCP prober.

Opens one TCP connection to the configured endpoint, races it against the
attempt timeout and classifies the result. No data is exchanged; the
connection is closed as soon as it is established.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Tuple

from netprobe.domain.config import EndpointConfig
from netprobe.domain.models.outcome import Failed, FailureKind, ProbeOutcome, Reachable

logger = logging.getLogger(__name__)

OpenConnection = Callable[..., Awaitable[Tuple[asyncio.StreamReader, asyncio.StreamWriter]]]


class TcpProber:
    """Performs bounded-time TCP connection attempts against one endpoint"""

    def __init__(self, endpoint: EndpointConfig, open_connection: OpenConnection | None = None):
        """Initialize prober

        Args:
            endpoint: Target endpoint and per-attempt timeout
            open_connection: Connection opener (defaults to asyncio.open_connection)
        """
        self.endpoint = endpoint
        self._open_connection = open_connection or asyncio.open_connection

    async def probe_once(self) -> ProbeOutcome:
        """Make exactly one connection attempt

        Returns:
            Reachable if the connection was established within the timeout,
            otherwise Failed classified as IO_ERROR or TIMEOUT
        """
        address = self.endpoint.address
        logger.debug(f"Checking connectivity to {address}")
        start = time.monotonic()

        try:
            _, writer = await asyncio.wait_for(
                self._open_connection(self.endpoint.host, self.endpoint.port),
                timeout=self.endpoint.timeout,
            )
        except (asyncio.TimeoutError, TimeoutError):
            # Both the attempt timeout and an OS-level ETIMEDOUT count as timeouts.
            # TimeoutError subclasses OSError, so it has to be caught first
            elapsed = time.monotonic() - start
            logger.debug(f"Connectivity check timeout: {address} after {elapsed:.3f}s")
            return Failed(FailureKind.TIMEOUT, elapsed=elapsed)
        except (OSError, UnicodeError) as e:
            # UnicodeError: the host name failed IDNA encoding during resolution
            elapsed = time.monotonic() - start
            logger.debug(f"Connectivity check failed: {address} - {e}")
            return Failed(FailureKind.IO_ERROR, detail=str(e) or type(e).__name__, elapsed=elapsed)

        elapsed = time.monotonic() - start
        logger.debug(f"Connectivity check successful: {address} in {elapsed:.3f}s")
        await _close(writer)
        return Reachable(elapsed=elapsed)


async def _close(writer: Any) -> None:
    """Close a freshly opened connection"""
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as e:
        # The attempt is already classified; teardown errors do not change it
        logger.debug(f"Error while closing probe connection: {e}")
