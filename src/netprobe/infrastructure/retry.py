"""Retry utilities using tenacity.

Builds the exponential backoff schedule used by the patient connectivity
check. Outcomes are returned rather than raised, so retrying is driven by
the result of each attempt.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from netprobe.domain.config import RetryConfig


def backoff_wait(retry_config: RetryConfig) -> wait_exponential:
    """Exponential wait: base_delay * 2^(n-1) before retry n, clamped to max_delay if set"""
    kwargs = {}
    if retry_config.max_delay is not None:
        kwargs["max"] = retry_config.max_delay
    return wait_exponential(multiplier=retry_config.base_delay, exp_base=2, min=0, **kwargs)


def _return_last_result(retry_state: RetryCallState) -> Any:
    """Hand back the final attempt's result instead of raising RetryError"""
    if retry_state.outcome is None:
        return None
    return retry_state.outcome.result()


def create_async_retrying(
    retry_config: RetryConfig,
    retry_condition: Callable[[Any], bool],
    before_sleep: Callable[[RetryCallState], None] | None = None,
    after: Callable[[RetryCallState], None] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncRetrying:
    """Create a result-driven AsyncRetrying controller.

    Args:
        retry_config: Retry configuration
        retry_condition: Returns True if the attempt's result should be retried
        before_sleep: Optional callback before each backoff wait
        after: Optional callback after each attempt
        sleep: Coroutine function used for backoff waits

    Returns:
        AsyncRetrying that makes at most max_retries + 1 attempts and returns
        the last result once attempts are exhausted
    """
    kwargs = {}
    if before_sleep is not None:
        kwargs["before_sleep"] = before_sleep
    if after is not None:
        kwargs["after"] = after

    return AsyncRetrying(
        stop=stop_after_attempt(retry_config.max_attempts),
        wait=backoff_wait(retry_config),
        retry=retry_if_result(retry_condition),
        retry_error_callback=_return_last_result,
        sleep=sleep,
        **kwargs,
    )
