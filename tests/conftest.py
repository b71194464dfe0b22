from typing import Any, Dict, List, Optional

import httpx
import pytest

from src.config import Settings
from src.correlation.domain.exceptions import CandidateTransportError
from src.correlation.domain.protocols import AnnotationSink, CandidateSource
from src.correlation.domain.value_objects import CandidateResource
from src.correlation.infrastructure.hubspot_client import HubSpotConversationsClient
from src.main import create_app
from src.support.domain.protocols import Mailer, OutboundEmail


class FakeCandidateSource(CandidateSource):
    """Replays one scripted response per attempt; the last one repeats."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[Dict[str, int]] = []

    async def list_candidates(self, after_ms: int, limit: int) -> List[CandidateResource]:
        self.calls.append({"after_ms": after_ms, "limit": limit})
        idx = min(len(self.calls), len(self.responses)) - 1
        item = self.responses[idx] if self.responses else []
        if isinstance(item, Exception):
            raise item
        return list(item)


class FakeAnnotationSink(AnnotationSink):
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.posted: List[Dict[str, Any]] = []

    async def post_annotation(self, resource_id: str, text: str, rich_text: Optional[str] = None) -> None:
        if self.error is not None:
            raise self.error
        self.posted.append({"resource_id": resource_id, "text": text, "rich_text": rich_text})


class FakeMailer(Mailer):
    def __init__(self, error: Optional[Exception] = None, on_send=None):
        self.error = error
        self.on_send = on_send
        self.sent: List[OutboundEmail] = []

    async def send(self, email: OutboundEmail) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append(email)
        if self.on_send is not None:
            self.on_send(email)
        return f"<msg-{len(self.sent)}@support.test>"


class FakeSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def make_source():
    return FakeCandidateSource


@pytest.fixture
def make_sink():
    return FakeAnnotationSink


@pytest.fixture
def make_mailer():
    return FakeMailer


@pytest.fixture
def transport_error():
    def _make(detail: str = "HubSpot API error 503: unavailable") -> CandidateTransportError:
        return CandidateTransportError(detail, status=503)

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENV="test",
        LOG_LEVEL="DEBUG",
        LOG_JSON=False,
        CORRELATION_STRATEGY="poll",
        CORRELATION_TIMEOUT_MS=200,
        HUBSPOT_THREAD_POLL_ATTEMPTS=2,
        HUBSPOT_THREAD_POLL_INTERVAL_MS=0,
        HUBSPOT_API_BASE_URL="https://hubspot.test",
        HUBSPOT_ACCESS_TOKEN="test-token",
        HUBSPOT_INBOX_ID="inbox-1",
        HUBSPOT_BCC_EMAIL="inbox@bcc.test",
        SMTP_HOST="smtp.test",
        SMTP_USER="support@relay.test",
    )


@pytest.fixture
def hubspot_handler():
    """Mutable request handler for the mocked HubSpot API; tests swap ``handler.respond``."""

    class Handler:
        def __init__(self):
            self.requests: List[httpx.Request] = []
            self.respond = lambda request: httpx.Response(200, json={"results": []})

        def __call__(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.respond(request)

    return Handler()


@pytest.fixture
def mailer(make_mailer):
    return make_mailer()


@pytest.fixture
def build_app(settings, mailer, hubspot_handler):
    def _build(**overrides):
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        hubspot = HubSpotConversationsClient(
            access_token=app_settings.HUBSPOT_ACCESS_TOKEN,
            inbox_id=app_settings.HUBSPOT_INBOX_ID,
            base_url=app_settings.HUBSPOT_API_BASE_URL,
            client=httpx.AsyncClient(transport=httpx.MockTransport(hubspot_handler)),
        )
        return create_app(app_settings, mailer=mailer, hubspot=hubspot)

    return _build


@pytest.fixture
def app(build_app):
    return build_app()


@pytest.fixture
async def app_client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
