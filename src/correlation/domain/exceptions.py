# src/correlation/domain/exceptions.py
"""
Correlation Domain Exceptions
"""
from typing import Optional

from fastapi import status

from src.shared.exceptions import DomainError


class CorrelationError(DomainError):
    """Base exception for resource correlation errors."""
    code = "resolution_failed"
    status_code = status.HTTP_502_BAD_GATEWAY


class InvalidCorrelationValueError(CorrelationError):
    """Raised when a correlation key or resource id is empty."""
    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class DuplicateKeyError(CorrelationError):
    """Raised when a second resolution is requested for a key that is still in flight."""
    code = "duplicate_key"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, key: str):
        super().__init__(
            "A resolution is already in flight for this correlation key",
            details={"correlation_key": key},
        )
        self.key = key


class WaiterTimeoutError(CorrelationError):
    """Raised when no callback arrived within the waiter's budget."""


class TriggerFailedError(CorrelationError):
    """Raised when the action that should create the remote resource failed."""
    code = "trigger_failed"


class PollingExhaustedError(CorrelationError):
    """Raised when polling found no candidate after every attempt."""

    def __init__(self, attempts: int):
        super().__init__(f"No matching resource after {attempts} attempts", details={"attempts": attempts})
        self.attempts = attempts


class CandidateTransportError(CorrelationError):
    """Raised on network/API failures talking to the third-party system."""
    code = "upstream_error"

    def __init__(self, detail: str, *, status: Optional[int] = None):
        super().__init__(detail, details={"upstream_status": status} if status else None)
        self.detail = detail
        self.upstream_status = status


class ResolutionCancelledError(CorrelationError):
    """Raised when a pending resolution was released by host shutdown."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ResolutionFailure(CorrelationError):
    """
    The single failure surfaced by the resolution façade.

    ``reason`` is one of the FailureReason codes (timeout, exhausted,
    transport_error, trigger_failed, cancelled).
    """

    def __init__(self, reason: str, detail: Optional[str] = None):
        message = f"Resolution failed: {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(
            message,
            code="trigger_failed" if reason == "trigger_failed" else "resolution_failed",
            details={"reason": reason},
        )
        self.reason = reason
        self.detail = detail


class AnnotationFailedError(CorrelationError):
    """Raised when the follow-up annotation could not be posted to a resolved resource."""
    code = "annotation_failed"

    def __init__(self, resource_id: str, detail: str):
        super().__init__(detail, details={"resource_id": resource_id})
        self.resource_id = resource_id
