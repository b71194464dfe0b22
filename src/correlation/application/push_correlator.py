"""
Push Correlator
Fires an external action and waits for the third party's callback.
"""
from __future__ import annotations

import asyncio

from src.correlation.application.registry import KeyLike, PendingWaiterRegistry
from src.correlation.domain.outcome import Cancelled, ResolutionOutcome, TimedOut, TriggerFailed, unwrap
from src.correlation.domain.protocols import TriggerAction
from src.correlation.domain.value_objects import CorrelationKey
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class PushCorrelator:
    """
    Push-correlation strategy.

    The waiter is registered before the trigger runs so a callback that
    arrives while the trigger is still in flight is not dropped. The deadline
    is counted from registration, so ``timeout`` bounds the whole call.
    """

    def __init__(self, registry: PendingWaiterRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> PendingWaiterRegistry:
        return self._registry

    async def correlate(self, key: KeyLike, trigger: TriggerAction, timeout: float) -> ResolutionOutcome:
        """
        Run one push correlation and return its terminal outcome.

        Raises:
            DuplicateKeyError: another resolution for ``key`` is in flight
            asyncio.CancelledError: the calling task was cancelled (waiter released)
        """
        k = CorrelationKey.of(key).value
        log = logger.bind(correlation_key=k)
        waiter = self._registry.register(k, timeout)

        try:
            await trigger()
        except asyncio.CancelledError:
            self._registry.fail(k, Cancelled("cancelled during trigger"), waiter)
            raise
        except Exception as exc:
            detail = str(exc) or exc.__class__.__name__
            log.warning("Trigger failed", error=detail)
            if self._registry.fail(k, TriggerFailed(detail), waiter):
                return TriggerFailed(detail)
            # a callback (or a newer registration for the key) settled it first
            return waiter.outcome  # type: ignore[return-value]

        try:
            outcome = await asyncio.wait_for(waiter.wait(), timeout=waiter.remaining(self._registry.now()))
        except asyncio.TimeoutError:
            if self._registry.expire(k, waiter):
                log.info("Push correlation timed out", timeout_s=timeout)
                return TimedOut()
            # lost the race: a callback, or a newer waiter that replaced this stale one
            outcome = waiter.outcome
            log.info("Waiter settled before expiry", outcome=type(outcome).__name__)
        except asyncio.CancelledError:
            self._registry.fail(k, Cancelled("caller cancelled"), waiter)
            raise

        log.info("Push correlation finished", outcome=type(outcome).__name__)
        return outcome  # type: ignore[return-value]

    async def resolve_by_callback(self, key: KeyLike, trigger: TriggerAction, timeout: float) -> str:
        """
        Trigger, then wait for the callback carrying the resource id.

        Raises:
            TriggerFailedError, WaiterTimeoutError, ResolutionCancelledError,
            DuplicateKeyError
        """
        return unwrap(await self.correlate(key, trigger, timeout))
