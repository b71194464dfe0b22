"""
Poll Resolver
Bounded, fixed-interval search of a recency-ordered listing endpoint.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from src.correlation.application.selection import pick_by_subject
from src.correlation.domain.exceptions import CandidateTransportError
from src.correlation.domain.outcome import Exhausted, ResolutionOutcome, Resolved, TransportFailure, unwrap
from src.correlation.domain.protocols import CandidateSource
from src.correlation.domain.value_objects import ResolutionAttempt, SearchParams
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PollResolver:
    """
    Poll-resolution strategy.

    The listing is eventually consistent with the trigger, so each attempt
    re-queries the same lookback window. Sleeps happen only between attempts.
    Total wall-clock is roughly ``max_attempts * interval_ms`` plus endpoint
    latency; there is no separate deadline.
    """

    def __init__(self, source: CandidateSource, *, sleep: Sleep = asyncio.sleep) -> None:
        self._source = source
        self._sleep = sleep

    async def poll(self, params: SearchParams, max_attempts: int, interval_ms: int) -> ResolutionOutcome:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")

        last_error: Optional[str] = None
        for number in range(1, max_attempts + 1):
            attempt = ResolutionAttempt(
                attempt_number=number,
                window_start_ms=params.window_start_ms,
                subject_hint=params.subject_hint,
            )
            try:
                candidates = await self._source.list_candidates(attempt.window_start_ms, params.page_size)
            except CandidateTransportError as exc:
                last_error = exc.detail
                logger.warning("Candidate listing failed", attempt=number, error=exc.detail)
            else:
                last_error = None
                chosen = pick_by_subject(candidates, attempt.subject_hint)
                if chosen is not None:
                    logger.info(
                        "Resource located by polling",
                        attempt=number,
                        resource_id=chosen.id,
                        candidates=len(candidates),
                    )
                    return Resolved(chosen.id)
                logger.debug("No candidates yet", attempt=number)

            if number < max_attempts:
                await self._sleep(interval_ms / 1000.0)

        if last_error is not None:
            return TransportFailure(last_error)
        logger.info("Polling exhausted", attempts=max_attempts)
        return Exhausted(max_attempts)

    async def resolve_by_polling(self, params: SearchParams, max_attempts: int, interval_ms: int) -> str:
        """
        Raises:
            PollingExhaustedError: no candidate after ``max_attempts`` queries
            CandidateTransportError: the final attempt failed in transport
        """
        return unwrap(await self.poll(params, max_attempts, interval_ms))
