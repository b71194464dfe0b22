import pytest
from pydantic import ValidationError

from src.config import Settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.CORRELATION_STRATEGY == "poll"
    assert s.CORRELATION_TIMEOUT_MS == 60_000
    assert (s.POLL_MAX_ATTEMPTS, s.POLL_INTERVAL_MS) == (5, 3_000)
    assert s.POLL_LOOKBACK_MS == 600_000
    assert s.SMTP_PORT == 587
    assert s.json_logs is False


def test_deployment_env_names(monkeypatch):
    monkeypatch.setenv("HUBSPOT_THREAD_POLL_ATTEMPTS", "7")
    monkeypatch.setenv("HUBSPOT_THREAD_POLL_INTERVAL_MS", "1500")
    monkeypatch.setenv("CORRELATION_STRATEGY", "Hybrid")
    monkeypatch.setenv("ENV", "prod")

    s = Settings(_env_file=None)

    assert s.POLL_MAX_ATTEMPTS == 7
    assert s.POLL_INTERVAL_MS == 1500
    assert s.CORRELATION_STRATEGY == "hybrid"
    assert s.is_prod and s.json_logs


@pytest.mark.parametrize(
    "field,value",
    [
        ("CORRELATION_STRATEGY", "webhook"),
        ("HUBSPOT_THREAD_POLL_ATTEMPTS", 0),
        ("CORRELATION_TIMEOUT_MS", -1),
        ("HUBSPOT_THREAD_POLL_INTERVAL_MS", -5),
        ("LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
