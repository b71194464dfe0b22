import asyncio
import time

import pytest

from src.correlation.application.push_correlator import PushCorrelator
from src.correlation.application.registry import PendingWaiterRegistry
from src.correlation.domain.exceptions import DuplicateKeyError, TriggerFailedError, WaiterTimeoutError
from src.correlation.domain.outcome import Cancelled, Resolved, TimedOut, TriggerFailed

KEY = "alice@example.com"


async def noop():
    return None


@pytest.fixture
def registry():
    return PendingWaiterRegistry()


@pytest.fixture
def correlator(registry):
    return PushCorrelator(registry)


async def test_callback_during_trigger_resolves(registry, correlator):
    async def trigger():
        # the third party calls back before the send call has returned
        registry.complete(KEY, "thread-1")

    assert await correlator.correlate(KEY, trigger, timeout=1) == Resolved("thread-1")
    assert KEY not in registry


async def test_callback_after_trigger_resolves(registry, correlator):
    async def trigger():
        asyncio.get_running_loop().call_later(0.01, registry.complete, KEY, "thread-2")

    assert await correlator.resolve_by_callback(KEY, trigger, timeout=1) == "thread-2"


async def test_callback_from_another_thread_resolves(registry, correlator):
    async def trigger():
        asyncio.get_running_loop().run_in_executor(None, registry.complete, KEY, "thread-3")

    assert await correlator.correlate(KEY, trigger, timeout=1) == Resolved("thread-3")


async def test_times_out_without_callback(registry, correlator):
    start = time.monotonic()
    outcome = await correlator.correlate(KEY, noop, timeout=0.05)
    elapsed = time.monotonic() - start

    assert outcome == TimedOut()
    assert 0.049 <= elapsed < 0.5
    assert KEY not in registry
    # a late callback is an ordinary no-op
    assert registry.complete(KEY, "thread-late") is False


async def test_trigger_failure_releases_waiter(registry, correlator):
    async def trigger():
        raise RuntimeError("smtp down")

    assert await correlator.correlate(KEY, trigger, timeout=1) == TriggerFailed("smtp down")
    assert KEY not in registry

    with pytest.raises(TriggerFailedError):
        await correlator.resolve_by_callback(KEY, trigger, timeout=1)


async def test_callback_before_trigger_failure_wins(registry, correlator):
    async def trigger():
        registry.complete(KEY, "thread-1")
        raise RuntimeError("connection reset after send")

    assert await correlator.correlate(KEY, trigger, timeout=1) == Resolved("thread-1")


async def test_resolve_by_callback_raises_on_timeout(correlator):
    with pytest.raises(WaiterTimeoutError):
        await correlator.resolve_by_callback(KEY, noop, timeout=0.02)


async def test_second_resolution_for_active_key_is_rejected(registry, correlator):
    first = asyncio.create_task(correlator.correlate(KEY, noop, timeout=5))
    await asyncio.sleep(0)
    assert KEY in registry

    with pytest.raises(DuplicateKeyError):
        await correlator.correlate(KEY, noop, timeout=5)

    registry.complete(KEY, "thread-1")
    assert await first == Resolved("thread-1")


async def test_caller_cancellation_releases_waiter(registry, correlator):
    task = asyncio.create_task(correlator.correlate(KEY, noop, timeout=5))
    await asyncio.sleep(0.01)
    waiter = registry.get(KEY)
    assert waiter is not None

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert KEY not in registry
    assert waiter.outcome == Cancelled("caller cancelled")


async def test_shutdown_releases_blocked_caller(registry, correlator):
    task = asyncio.create_task(correlator.correlate(KEY, noop, timeout=5))
    await asyncio.sleep(0.01)

    assert registry.close() == 1
    assert await task == Cancelled("shutdown")


async def test_slow_trigger_does_not_settle_newer_waiter_for_same_key(registry, correlator):
    release = asyncio.Event()

    async def slow_trigger():
        await release.wait()

    first = asyncio.create_task(correlator.correlate(KEY, slow_trigger, timeout=0.05))
    await asyncio.sleep(0.1)
    # the first waiter is past its deadline, so a new resolution may take the key
    second = asyncio.create_task(correlator.correlate(KEY, noop, timeout=5))
    await asyncio.sleep(0.01)
    newer = registry.get(KEY)
    assert newer is not None

    release.set()
    outcome = await first
    assert isinstance(outcome, TimedOut)
    assert registry.get(KEY) is newer
    assert not second.done()

    assert registry.complete(KEY, "thread-2") is True
    assert await second == Resolved("thread-2")


async def test_failing_trigger_of_replaced_waiter_leaves_newer_one_pending(registry, correlator):
    release = asyncio.Event()

    async def doomed_trigger():
        await release.wait()
        raise RuntimeError("smtp down")

    first = asyncio.create_task(correlator.correlate(KEY, doomed_trigger, timeout=0.05))
    await asyncio.sleep(0.1)
    second = asyncio.create_task(correlator.correlate(KEY, noop, timeout=5))
    await asyncio.sleep(0.01)

    release.set()
    assert isinstance(await first, TimedOut)
    assert KEY in registry

    registry.complete(KEY, "thread-2")
    assert await second == Resolved("thread-2")
