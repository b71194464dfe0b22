import pytest

from src.correlation.application.poll_resolver import PollResolver
from src.correlation.domain.exceptions import CandidateTransportError, PollingExhaustedError
from src.correlation.domain.outcome import Exhausted, Resolved, TransportFailure
from src.correlation.domain.value_objects import CandidateResource, SearchParams

THREADS = [
    CandidateResource(id="A", subject="Billing issue", recency_ms=100),
    CandidateResource(id="B", subject="Billing issue", recency_ms=200),
    CandidateResource(id="C", subject="Other", recency_ms=300),
]


def params(hint=None, trigger_time_ms=1_000_000):
    return SearchParams(trigger_time_ms=trigger_time_ms, subject_hint=hint, lookback_ms=600_000, page_size=20)


async def test_picks_most_recent_subject_match(make_source, fake_sleep):
    source = make_source([THREADS])
    outcome = await PollResolver(source, sleep=fake_sleep).poll(params("Billing"), max_attempts=3, interval_ms=250)

    assert outcome == Resolved("B")
    assert len(source.calls) == 1
    assert fake_sleep.calls == []


async def test_falls_back_to_most_recent_when_nothing_matches(make_source, fake_sleep):
    source = make_source([THREADS])
    outcome = await PollResolver(source, sleep=fake_sleep).poll(params("Nonexistent"), max_attempts=3, interval_ms=250)
    assert outcome == Resolved("C")


async def test_queries_lookback_window(make_source, fake_sleep):
    source = make_source([THREADS])
    await PollResolver(source, sleep=fake_sleep).poll(params("Billing"), max_attempts=1, interval_ms=0)
    assert source.calls == [{"after_ms": 400_000, "limit": 20}]


async def test_exhausted_after_n_queries_and_n_minus_one_sleeps(make_source, fake_sleep):
    source = make_source([[]])
    outcome = await PollResolver(source, sleep=fake_sleep).poll(params("Billing"), max_attempts=3, interval_ms=250)

    assert outcome == Exhausted(3)
    assert len(source.calls) == 3
    assert fake_sleep.calls == [0.25, 0.25]


async def test_resolves_on_later_attempt(make_source, fake_sleep):
    source = make_source([[], THREADS])
    outcome = await PollResolver(source, sleep=fake_sleep).poll(params("Other"), max_attempts=5, interval_ms=1000)

    assert outcome == Resolved("C")
    assert len(source.calls) == 2
    assert fake_sleep.calls == [1.0]


async def test_transport_error_aborts_only_that_attempt(make_source, fake_sleep, transport_error):
    source = make_source([transport_error(), THREADS])
    outcome = await PollResolver(source, sleep=fake_sleep).poll(params("Billing"), max_attempts=3, interval_ms=10)
    assert outcome == Resolved("B")


async def test_transport_error_on_final_attempt_is_reported(make_source, fake_sleep, transport_error):
    source = make_source([[], transport_error("HubSpot API error 500: boom")])
    outcome = await PollResolver(source, sleep=fake_sleep).poll(params(), max_attempts=2, interval_ms=10)
    assert outcome == TransportFailure("HubSpot API error 500: boom")


async def test_earlier_transport_error_still_ends_exhausted(make_source, fake_sleep, transport_error):
    source = make_source([transport_error(), []])
    outcome = await PollResolver(source, sleep=fake_sleep).poll(params(), max_attempts=3, interval_ms=10)
    assert outcome == Exhausted(3)


async def test_resolve_by_polling_raises(make_source, fake_sleep, transport_error):
    with pytest.raises(PollingExhaustedError) as exc:
        await PollResolver(make_source([[]]), sleep=fake_sleep).resolve_by_polling(params(), 2, 0)
    assert exc.value.attempts == 2

    with pytest.raises(CandidateTransportError):
        await PollResolver(make_source([transport_error()]), sleep=fake_sleep).resolve_by_polling(params(), 2, 0)


async def test_rejects_invalid_budgets(make_source, fake_sleep):
    resolver = PollResolver(make_source([THREADS]), sleep=fake_sleep)
    with pytest.raises(ValueError):
        await resolver.poll(params(), max_attempts=0, interval_ms=10)
    with pytest.raises(ValueError):
        await resolver.poll(params(), max_attempts=1, interval_ms=-1)
