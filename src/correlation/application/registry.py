"""
Pending Waiter Registry
Process-wide table of outstanding push correlations, keyed by correlation key.
"""
from __future__ import annotations

import asyncio
import threading
import time
from typing import Callable, Dict, List, Optional, Union

from src.correlation.domain.exceptions import DuplicateKeyError, ResolutionCancelledError
from src.correlation.domain.outcome import Cancelled, ResolutionOutcome, Resolved, TimedOut
from src.correlation.domain.value_objects import CorrelationKey, require_resource_id
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)

KeyLike = Union[CorrelationKey, str]


class PendingWaiter:
    """
    One outstanding resolution request.

    ``outcome`` is a single-assignment slot written by the registry while it
    holds its lock; the awaiting task is woken through an asyncio future on
    the loop that registered the waiter.
    """

    __slots__ = ("key", "created_at", "expires_at", "_loop", "_future", "_outcome")

    def __init__(self, key: str, *, created_at: float, expires_at: float, loop: asyncio.AbstractEventLoop) -> None:
        self.key = key
        self.created_at = created_at
        self.expires_at = expires_at
        self._loop = loop
        self._future: asyncio.Future = loop.create_future()
        self._outcome: Optional[ResolutionOutcome] = None

    @property
    def outcome(self) -> Optional[ResolutionOutcome]:
        return self._outcome

    @property
    def is_settled(self) -> bool:
        return self._outcome is not None

    def remaining(self, now: float) -> float:
        return max(0.0, self.expires_at - now)

    async def wait(self) -> ResolutionOutcome:
        """Suspend until an outcome is delivered. Cancelling the caller leaves the slot untouched."""
        return await asyncio.shield(self._future)

    def _settle(self, outcome: ResolutionOutcome) -> bool:
        # caller holds the registry lock
        if self._outcome is not None:
            return False
        self._outcome = outcome
        if not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._publish)
        return True

    def _publish(self) -> None:
        if not self._future.done():
            self._future.set_result(self._outcome)

    def __repr__(self) -> str:
        return f"PendingWaiter(key={self.key!r}, settled={self.is_settled})"


class PendingWaiterRegistry:
    """
    Maps a correlation key to at most one active waiter.

    Every terminal operation (complete, expire, fail, close) removes the entry
    and writes its outcome inside one critical section, so for a given key
    exactly one of them wins and the others return False.

    Duplicate policy: ``register`` rejects a key whose waiter is still active
    with ``DuplicateKeyError``. A waiter past its expiry that nobody expired
    (its caller went away) is not active; it is failed with ``TimedOut`` and
    replaced.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._waiters: Dict[str, PendingWaiter] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def register(self, key: KeyLike, timeout: float) -> PendingWaiter:
        """
        Create the waiter for ``key`` before its trigger fires.

        Must be called from a running event loop; the waiter wakes on it.

        Raises:
            DuplicateKeyError: an active waiter already exists for ``key``
            ResolutionCancelledError: the registry has been closed
        """
        k = CorrelationKey.of(key).value
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        loop = asyncio.get_running_loop()

        with self._lock:
            if self._closed:
                raise ResolutionCancelledError("Registry is shut down")
            now = self._clock()
            existing = self._waiters.get(k)
            if existing is not None:
                if existing.expires_at > now:
                    raise DuplicateKeyError(k)
                existing._settle(TimedOut("expired before re-registration"))
                logger.info("Replacing stale waiter", correlation_key=k)
            waiter = PendingWaiter(k, created_at=now, expires_at=now + timeout, loop=loop)
            self._waiters[k] = waiter

        logger.debug("Waiter registered", correlation_key=k, timeout_s=timeout)
        return waiter

    def complete(self, key: KeyLike, resource_id: str) -> bool:
        """
        Resolve the waiter for ``key``.

        Returns False (no-op) when no waiter is pending, which is the normal
        case for stale, duplicate or unrelated callbacks.
        """
        k = CorrelationKey.of(key).value
        rid = require_resource_id(resource_id)
        won = self._settle(k, Resolved(rid))
        logger.info("Waiter completion", correlation_key=k, resource_id=rid, matched=won)
        return won

    def expire(self, key: KeyLike, waiter: Optional[PendingWaiter] = None) -> bool:
        """
        Fail the waiter with ``TimedOut`` unless something else settled it first.

        With ``waiter`` given, only that exact waiter is expired; a newer
        waiter registered under the same key is left alone.
        """
        k = CorrelationKey.of(key).value
        won = self._settle(k, TimedOut(), waiter)
        if won:
            logger.info("Waiter expired", correlation_key=k)
        return won

    def fail(self, key: KeyLike, outcome: ResolutionOutcome, waiter: Optional[PendingWaiter] = None) -> bool:
        """Fail the waiter with an arbitrary terminal outcome (trigger failure, cancellation)."""
        if isinstance(outcome, Resolved):
            raise ValueError("use complete() to resolve a waiter")
        k = CorrelationKey.of(key).value
        won = self._settle(k, outcome, waiter)
        if won:
            logger.info("Waiter failed", correlation_key=k, reason=outcome.reason.value)
        return won

    def close(self) -> int:
        """
        Release every pending waiter with ``Cancelled`` (host shutdown).

        Returns the number of waiters released. Later registrations fail.
        """
        with self._lock:
            self._closed = True
            waiters = list(self._waiters.values())
            self._waiters.clear()
            for waiter in waiters:
                waiter._settle(Cancelled("shutdown"))
        if waiters:
            logger.warning("Released pending waiters on shutdown", count=len(waiters))
        return len(waiters)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    def pending_keys(self) -> List[str]:
        with self._lock:
            return list(self._waiters)

    def get(self, key: KeyLike) -> Optional[PendingWaiter]:
        with self._lock:
            return self._waiters.get(CorrelationKey.of(key).value)

    def now(self) -> float:
        return self._clock()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, CorrelationKey)):
            return False
        k = key.value if isinstance(key, CorrelationKey) else key.strip()
        with self._lock:
            return k in self._waiters

    def __len__(self) -> int:
        with self._lock:
            return len(self._waiters)

    # ------------------------------------------------------------------
    def _settle(self, key: str, outcome: ResolutionOutcome, expected: Optional[PendingWaiter] = None) -> bool:
        with self._lock:
            current = self._waiters.get(key)
            if current is None or (expected is not None and current is not expected):
                return False
            del self._waiters[key]
            return current._settle(outcome)
