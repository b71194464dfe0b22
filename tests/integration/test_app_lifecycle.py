from httpx import AsyncClient

from src.correlation.domain.outcome import Cancelled


async def test_health_reports_pending_waiters(app, app_client: AsyncClient):
    r = await app_client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["pending_waiters"] == 0
    assert r.json()["strategy"] == "poll"

    app.state.registry.register("alice@example.com", timeout=5)
    r = await app_client.get("/health")
    assert r.json()["pending_waiters"] == 1
    assert set(r.json()["metrics"]) == {"counters", "histograms"}


async def test_root(app_client: AsyncClient):
    r = await app_client.get("/")
    assert r.json()["health"] == "/health"


async def test_shutdown_releases_waiters(app):
    async with app.router.lifespan_context(app):
        waiter = app.state.registry.register("alice@example.com", timeout=5)
        assert not waiter.is_settled

    assert waiter.outcome == Cancelled("shutdown")
    assert len(app.state.registry) == 0
