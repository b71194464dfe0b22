from .exceptions import (
    AnnotationFailedError,
    CandidateTransportError,
    CorrelationError,
    DuplicateKeyError,
    InvalidCorrelationValueError,
    PollingExhaustedError,
    ResolutionCancelledError,
    ResolutionFailure,
    TriggerFailedError,
    WaiterTimeoutError,
)
from .outcome import (
    Cancelled,
    Exhausted,
    FailureReason,
    ResolutionOutcome,
    Resolved,
    TimedOut,
    TransportFailure,
    TriggerFailed,
    unwrap,
)
from .protocols import AnnotationSink, CandidateSource, TriggerAction
from .value_objects import (
    CandidateResource,
    CorrelationKey,
    ResolutionAttempt,
    SearchParams,
    Strategy,
    require_resource_id,
    to_timestamp,
)

__all__ = [
    "AnnotationFailedError",
    "AnnotationSink",
    "CandidateResource",
    "CandidateSource",
    "CandidateTransportError",
    "Cancelled",
    "CorrelationError",
    "CorrelationKey",
    "DuplicateKeyError",
    "Exhausted",
    "FailureReason",
    "InvalidCorrelationValueError",
    "PollingExhaustedError",
    "ResolutionAttempt",
    "ResolutionCancelledError",
    "ResolutionFailure",
    "ResolutionOutcome",
    "Resolved",
    "SearchParams",
    "Strategy",
    "TimedOut",
    "TransportFailure",
    "TriggerAction",
    "TriggerFailed",
    "TriggerFailedError",
    "WaiterTimeoutError",
    "require_resource_id",
    "to_timestamp",
    "unwrap",
]
