from .callback_receiver import CallbackReceiver
from .poll_resolver import PollResolver
from .push_correlator import PushCorrelator
from .registry import PendingWaiter, PendingWaiterRegistry
from .resolution_service import ResolutionPolicy, ResolutionRequest, ResolutionService
from .selection import pick_by_subject, pick_most_recent

__all__ = [
    "CallbackReceiver",
    "PendingWaiter",
    "PendingWaiterRegistry",
    "PollResolver",
    "PushCorrelator",
    "ResolutionPolicy",
    "ResolutionRequest",
    "ResolutionService",
    "pick_by_subject",
    "pick_most_recent",
]
