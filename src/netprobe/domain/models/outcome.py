"""Probe outcome model - the result of a single connection attempt.

A probe either reaches the endpoint or fails in exactly one classified way.
There is no "completed but not connected" variant, so callers never have to
handle an ambiguous result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, Optional, Union

if TYPE_CHECKING:
    from netprobe.domain.errors import ConnectivityError


class FailureKind(str, Enum):
    """Classification of a failed connection attempt"""

    IO_ERROR = "io_error"
    TIMEOUT = "timeout"


# Failure kinds the patient check retries. A new kind must be added here
# explicitly to become retryable.
RETRYABLE_KINDS: FrozenSet[FailureKind] = frozenset({FailureKind.IO_ERROR, FailureKind.TIMEOUT})


@dataclass(frozen=True)
class Reachable:
    """The connection was established within the attempt timeout"""

    elapsed: float = 0.0

    def describe(self) -> str:
        return "reachable"


@dataclass(frozen=True)
class Failed:
    """The connection attempt failed

    Attributes:
        kind: Failure classification
        detail: Description of the underlying error (diagnostics only)
        elapsed: Seconds spent on the attempt
    """

    kind: FailureKind
    detail: Optional[str] = None
    elapsed: float = 0.0

    @property
    def is_retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def describe(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value

    def to_error(self) -> "ConnectivityError":
        """Convert to the matching ConnectivityError"""
        from netprobe.domain.errors import error_for_failure

        return error_for_failure(self)


ProbeOutcome = Union[Reachable, Failed]


def is_retryable(outcome: ProbeOutcome) -> bool:
    """Check whether an outcome should trigger another attempt"""
    return isinstance(outcome, Failed) and outcome.is_retryable
