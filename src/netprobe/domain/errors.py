"""Connectivity error taxonomy."""

from typing import TYPE_CHECKING, Optional

from netprobe.domain.models.outcome import FailureKind

if TYPE_CHECKING:
    from netprobe.domain.models.outcome import Failed


class ConnectivityError(Exception):
    """Base class for connection attempt failures.

    Attributes:
        kind: Failure classification
        detail: Description of the underlying error, if any
    """

    kind: FailureKind

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class ConnectivityIOError(ConnectivityError):
    """Transport-level failure (connection refused, network unreachable, ...)"""

    kind = FailureKind.IO_ERROR

    def __init__(self, detail: str):
        super().__init__(f"Network error: {detail}", detail=detail)


class ConnectivityTimeoutError(ConnectivityError):
    """Connection attempt exceeded its time budget"""

    kind = FailureKind.TIMEOUT

    def __init__(self, detail: Optional[str] = None):
        super().__init__("Connection timeout", detail=detail)


def error_for_failure(failed: "Failed") -> ConnectivityError:
    """Map a failed outcome to its exception"""
    if failed.kind is FailureKind.IO_ERROR:
        return ConnectivityIOError(failed.detail or "unknown error")
    if failed.kind is FailureKind.TIMEOUT:
        return ConnectivityTimeoutError(failed.detail)
    raise ValueError(f"Unknown failure kind: {failed.kind!r}")
