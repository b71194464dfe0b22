"""
Resolution Outcomes
Terminal result of one resolution, delivered exactly once to the caller
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .exceptions import (
    CandidateTransportError,
    PollingExhaustedError,
    ResolutionCancelledError,
    TriggerFailedError,
    WaiterTimeoutError,
)


class FailureReason(str, Enum):
    TIMEOUT = "timeout"
    EXHAUSTED = "exhausted"
    TRANSPORT_ERROR = "transport_error"
    TRIGGER_FAILED = "trigger_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Resolved:
    """The remote resource was found."""

    resource_id: str

    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class TimedOut:
    """Push path: no callback arrived before the waiter's deadline."""

    reason = FailureReason.TIMEOUT
    detail: Optional[str] = None

    def is_success(self) -> bool:
        return False


@dataclass(frozen=True)
class Exhausted:
    """Poll path: every attempt came back without a match."""

    attempts: int = 0
    reason = FailureReason.EXHAUSTED

    @property
    def detail(self) -> str:
        return f"no match after {self.attempts} attempts"

    def is_success(self) -> bool:
        return False


@dataclass(frozen=True)
class TransportFailure:
    """The listing endpoint failed on the final attempt."""

    detail: str
    reason = FailureReason.TRANSPORT_ERROR

    def is_success(self) -> bool:
        return False


@dataclass(frozen=True)
class TriggerFailed:
    """The initiating call to the third party failed; never retried."""

    detail: str
    reason = FailureReason.TRIGGER_FAILED

    def is_success(self) -> bool:
        return False


@dataclass(frozen=True)
class Cancelled:
    """The host shut down while the resolution was pending."""

    detail: Optional[str] = None
    reason = FailureReason.CANCELLED

    def is_success(self) -> bool:
        return False


Failed = Union[TimedOut, Exhausted, TransportFailure, TriggerFailed, Cancelled]
ResolutionOutcome = Union[Resolved, Failed]


def unwrap(outcome: ResolutionOutcome) -> str:
    """Return the resource id, or raise the error matching a failed outcome."""
    if isinstance(outcome, Resolved):
        return outcome.resource_id
    if isinstance(outcome, TimedOut):
        raise WaiterTimeoutError(outcome.detail or "No callback received before the deadline")
    if isinstance(outcome, Exhausted):
        raise PollingExhaustedError(outcome.attempts)
    if isinstance(outcome, TransportFailure):
        raise CandidateTransportError(outcome.detail)
    if isinstance(outcome, TriggerFailed):
        raise TriggerFailedError(outcome.detail)
    raise ResolutionCancelledError(outcome.detail or "Resolution cancelled")
