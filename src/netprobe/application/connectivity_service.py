"""Connectivity service - patient and quick reachability checks.

The patient check retries failed attempts with exponential backoff and
reports exhaustion as ``False``. The quick check makes a single attempt and
raises the attempt's failure, since without retries it cannot tell a
transient failure from an outage.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol

from tenacity import RetryCallState

from netprobe.domain.config import AppConfig, EndpointConfig, RetryConfig
from netprobe.domain.models.outcome import Failed, ProbeOutcome, Reachable, is_retryable
from netprobe.infrastructure.config.config_manager import ConfigManager
from netprobe.infrastructure.prober import TcpProber
from netprobe.infrastructure.retry import create_async_retrying

logger = logging.getLogger(__name__)


class Prober(Protocol):
    """Anything that makes one classified connection attempt"""

    async def probe_once(self) -> ProbeOutcome: ...


class ConnectivityChecker:
    """Answers "is the server reachable right now?" for one configured endpoint

    Holds only immutable configuration, so a single instance can serve any
    number of concurrent checks.
    """

    def __init__(
        self,
        endpoint: EndpointConfig,
        retry_config: RetryConfig,
        prober: Optional[Prober] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize checker

        Args:
            endpoint: Target endpoint and per-attempt timeout
            retry_config: Backoff policy for the patient check
            prober: Attempt primitive (defaults to a TcpProber for endpoint)
            sleep: Coroutine function used for backoff waits
        """
        self.endpoint = endpoint
        self.retry_config = retry_config
        self.prober = prober or TcpProber(endpoint)
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs) -> "ConnectivityChecker":
        return cls(config.endpoint, config.retry, **kwargs)

    async def check_connectivity(self) -> bool:
        """Check connectivity, retrying failed attempts with exponential backoff

        Returns:
            True as soon as an attempt reaches the endpoint, False once all
            max_retries + 1 attempts have failed

        Raises:
            ConnectivityError: If an attempt failed in a way that is not retryable
        """
        max_attempts = self.retry_config.max_attempts
        retrying = create_async_retrying(
            self.retry_config,
            retry_condition=is_retryable,
            before_sleep=self._log_retry,
            after=self._log_attempt,
            sleep=self._sleep,
        )

        start = time.monotonic()
        outcome = await retrying(self.prober.probe_once)
        attempt = retrying.statistics.get("attempt_number", 1)
        # tenacity only reports attempts that are retried; report the final one here
        logger.debug(
            f"Connectivity attempt {attempt}/{max_attempts}: {outcome.describe()} "
            f"(elapsed {time.monotonic() - start:.3f}s)"
        )

        if isinstance(outcome, Reachable):
            if attempt == 1:
                logger.info("Connectivity check passed on first attempt")
            else:
                logger.info(f"Connectivity check passed on retry attempt {attempt - 1}")
            return True

        if not outcome.is_retryable:
            logger.error(f"Connectivity check aborted on attempt {attempt}: {outcome.describe()}")
            raise outcome.to_error()

        logger.warning(
            f"Connectivity check to {self.endpoint.address} failed after "
            f"{max_attempts} attempts ({self.retry_config.max_retries} retries): {outcome.describe()}"
        )
        return False

    async def check_connectivity_quick(self) -> bool:
        """Check connectivity with a single attempt and no retries

        Returns:
            True if the endpoint was reached

        Raises:
            ConnectivityIOError: If the attempt failed with a transport error
            ConnectivityTimeoutError: If the attempt timed out
        """
        outcome = await self.prober.probe_once()
        if isinstance(outcome, Reachable):
            logger.info("Quick connectivity check: connected")
            return True

        logger.info(f"Quick connectivity check: not connected ({outcome.describe()})")
        raise outcome.to_error()

    def _log_attempt(self, retry_state: RetryCallState) -> None:
        if retry_state.outcome is None or retry_state.outcome.failed:
            return
        if retry_state.attempt_number >= self.retry_config.max_attempts:
            # Logged by check_connectivity with the final outcome
            return
        outcome = retry_state.outcome.result()
        logger.debug(
            f"Connectivity attempt {retry_state.attempt_number}/{self.retry_config.max_attempts}: "
            f"{outcome.describe()} (elapsed {retry_state.seconds_since_start:.3f}s)"
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        outcome = retry_state.outcome.result() if retry_state.outcome else None
        reason = outcome.describe() if isinstance(outcome, Failed) else "unknown"
        logger.warning(
            f"Connectivity check error ({reason}); retrying "
            f"(retry {retry_state.attempt_number}/{self.retry_config.max_retries}) "
            f"after {delay * 1000:.0f}ms"
        )


@functools.lru_cache(maxsize=1)
def load_app_config() -> AppConfig:
    """Load the process-wide configuration once"""
    return ConfigManager().config


def default_checker() -> ConnectivityChecker:
    return ConnectivityChecker.from_config(load_app_config())


async def check_connectivity() -> bool:
    """Patient check against the process-wide configured endpoint"""
    return await default_checker().check_connectivity()


async def check_connectivity_quick() -> bool:
    """Quick check against the process-wide configured endpoint"""
    return await default_checker().check_connectivity_quick()
