"""
Collaborator protocols for the correlation core.
Abstracts the third-party system without coupling to infrastructure.
"""
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

from .value_objects import CandidateResource

# Asks the third party to (eventually) create a resource referencing the key.
# Raises on transport failure.
TriggerAction = Callable[[], Awaitable[None]]


class CandidateSource(ABC):
    """Recency-ordered listing of remote resources."""

    @abstractmethod
    async def list_candidates(self, after_ms: int, limit: int) -> List[CandidateResource]:
        """
        Return resources active after ``after_ms``, at most ``limit`` of them.

        Raises:
            CandidateTransportError: on network/API failures
        """
        pass


class AnnotationSink(ABC):
    """Posts an internal note to a resolved resource."""

    @abstractmethod
    async def post_annotation(self, resource_id: str, text: str, rich_text: Optional[str] = None) -> None:
        pass
