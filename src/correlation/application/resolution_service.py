"""
Resolution Service
Single entry point: "send a thing, then get me its externally-created resource id".
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from src.correlation.application.poll_resolver import PollResolver
from src.correlation.application.push_correlator import PushCorrelator
from src.correlation.domain.exceptions import (
    AnnotationFailedError,
    CandidateTransportError,
    ResolutionCancelledError,
    ResolutionFailure,
)
from src.correlation.domain.outcome import Cancelled, ResolutionOutcome, Resolved, TimedOut, TriggerFailed
from src.correlation.domain.protocols import AnnotationSink, TriggerAction
from src.correlation.domain.value_objects import CorrelationKey, SearchParams, Strategy
from src.shared.exceptions import NotConfiguredError
from src.shared.infrastructure.observability.logger import get_logger
from src.shared.infrastructure.observability.metrics import MetricsCollector

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ResolutionRequest:
    """What to trigger, and how to recognise the resource it creates."""

    key: Union[CorrelationKey, str]
    trigger: TriggerAction
    subject_hint: Optional[str] = None


@dataclass(frozen=True)
class ResolutionPolicy:
    """Deployment configuration for strategy selection and its budgets."""

    strategy: Strategy = Strategy.POLL
    timeout_ms: int = 60_000
    max_attempts: int = 5
    interval_ms: int = 3_000
    lookback_ms: int = 10 * 60 * 1000
    page_size: int = 20

    @classmethod
    def from_settings(cls, settings) -> "ResolutionPolicy":
        return cls(
            strategy=Strategy(settings.CORRELATION_STRATEGY),
            timeout_ms=settings.CORRELATION_TIMEOUT_MS,
            max_attempts=settings.POLL_MAX_ATTEMPTS,
            interval_ms=settings.POLL_INTERVAL_MS,
            lookback_ms=settings.POLL_LOOKBACK_MS,
            page_size=settings.POLL_PAGE_SIZE,
        )


class ResolutionService:
    """
    Resolution façade.

    - push: register a waiter, trigger, wait for the callback
    - poll: trigger once, then search the listing endpoint
    - hybrid: push; on timeout fall back to polling from the first
      trigger time without re-triggering

    Internal outcomes are surfaced as a single ``ResolutionFailure``; the
    follow-up annotation is only attempted for a resolved id.
    """

    def __init__(
        self,
        *,
        policy: ResolutionPolicy,
        correlator: Optional[PushCorrelator] = None,
        poller: Optional[PollResolver] = None,
        annotations: Optional[AnnotationSink] = None,
        metrics: Optional[MetricsCollector] = None,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self.policy = policy
        self._correlator = correlator
        self._poller = poller
        self._annotations = annotations
        self._metrics = metrics or MetricsCollector(enabled=False)
        self._clock_ms = clock_ms

    async def resolve_outcome(
        self, request: ResolutionRequest, strategy: Optional[Strategy] = None
    ) -> ResolutionOutcome:
        """
        Run the configured strategy and return its terminal outcome.

        Only ``DuplicateKeyError``, ``InvalidCorrelationValueError`` (blank
        key), ``NotConfiguredError`` and task cancellation propagate. A closed
        registry yields ``Cancelled("shutdown")``.
        """
        chosen = Strategy(strategy or self.policy.strategy)
        key = CorrelationKey.of(request.key)
        started = time.perf_counter()

        if chosen is Strategy.PUSH:
            outcome = await self._push(key, request)
        elif chosen is Strategy.POLL:
            outcome = await self._trigger_then_poll(request)
        else:
            outcome = await self._hybrid(key, request)

        label = "resolved" if isinstance(outcome, Resolved) else outcome.reason.value
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        self._metrics.increment_counter("resolutions_total", strategy=chosen.value, outcome=label)
        self._metrics.observe_histogram("resolution_duration_ms", elapsed_ms, strategy=chosen.value)
        logger.info(
            "Resolution finished",
            strategy=chosen.value,
            outcome=label,
            duration_ms=int(elapsed_ms),
        )
        return outcome

    async def resolve(self, request: ResolutionRequest, strategy: Optional[Strategy] = None) -> str:
        """
        Resolve the resource id.

        Raises:
            ResolutionFailure: for every failed outcome, with its reason code
            DuplicateKeyError: a resolution for the same key is in flight
            InvalidCorrelationValueError: the key is blank
        """
        outcome = await self.resolve_outcome(request, strategy)
        if isinstance(outcome, Resolved):
            return outcome.resource_id
        raise ResolutionFailure(outcome.reason.value, outcome.detail)

    async def resolve_and_annotate(
        self,
        request: ResolutionRequest,
        text: str,
        *,
        rich_text: Optional[str] = None,
        strategy: Optional[Strategy] = None,
    ) -> str:
        """Resolve, then post the follow-up note to the resolved resource."""
        if self._annotations is None:
            raise NotConfiguredError("No annotation sink configured")
        resource_id = await self.resolve(request, strategy)
        try:
            await self._annotations.post_annotation(resource_id, text, rich_text)
        except CandidateTransportError as exc:
            logger.error("Annotation failed", resource_id=resource_id, error=exc.detail)
            raise AnnotationFailedError(resource_id, exc.detail) from exc
        logger.info("Annotation posted", resource_id=resource_id)
        return resource_id

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------
    def _require_correlator(self) -> PushCorrelator:
        if self._correlator is None:
            raise NotConfiguredError("Push correlation is not configured")
        return self._correlator

    def _require_poller(self) -> PollResolver:
        if self._poller is None:
            raise NotConfiguredError("Poll resolution is not configured")
        return self._poller

    async def _push(self, key: CorrelationKey, request: ResolutionRequest) -> ResolutionOutcome:
        correlator = self._require_correlator()
        try:
            return await correlator.correlate(key, request.trigger, self.policy.timeout_ms / 1000.0)
        except ResolutionCancelledError:
            # registry closed for shutdown before this request could register
            logger.info("Resolution refused during shutdown", correlation_key=key.value)
            return Cancelled("shutdown")

    async def _trigger_then_poll(self, request: ResolutionRequest) -> ResolutionOutcome:
        poller = self._require_poller()
        trigger_time = self._clock_ms()
        try:
            await request.trigger()
        except Exception as exc:
            detail = str(exc) or exc.__class__.__name__
            logger.warning("Trigger failed", error=detail)
            return TriggerFailed(detail)
        return await self._poll(poller, trigger_time, request.subject_hint)

    async def _hybrid(self, key: CorrelationKey, request: ResolutionRequest) -> ResolutionOutcome:
        poller = self._require_poller()
        trigger_time = self._clock_ms()
        outcome = await self._push(key, request)
        if not isinstance(outcome, TimedOut):
            return outcome
        logger.info("No callback before timeout; falling back to polling")
        return await self._poll(poller, trigger_time, request.subject_hint)

    async def _poll(self, poller: PollResolver, trigger_time: int, subject_hint: Optional[str]) -> ResolutionOutcome:
        params = SearchParams(
            trigger_time_ms=trigger_time,
            subject_hint=subject_hint,
            lookback_ms=self.policy.lookback_ms,
            page_size=self.policy.page_size,
        )
        return await poller.poll(params, self.policy.max_attempts, self.policy.interval_ms)
