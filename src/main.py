from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from src.config import Settings, get_settings
from src.correlation.api.routes.callbacks import router as callbacks_router
from src.correlation.application.callback_receiver import CallbackReceiver
from src.correlation.application.poll_resolver import PollResolver
from src.correlation.application.push_correlator import PushCorrelator
from src.correlation.application.registry import PendingWaiterRegistry
from src.correlation.application.resolution_service import ResolutionPolicy, ResolutionService
from src.correlation.infrastructure.hubspot_client import HubSpotConversationsClient
from src.shared.exceptions import register_exception_handlers  # central mapping
from src.shared.health import router as health_router
from src.shared.http.middleware.request_id_middleware import RequestIdMiddleware
from src.shared.infrastructure.observability.logger import configure_logging, get_logger
from src.shared.infrastructure.observability.metrics import MetricsCollector
from src.support.api.routes import router as support_router
from src.support.application.ticket_service import SupportTicketService
from src.support.domain.protocols import Mailer
from src.support.infrastructure.smtp_mailer import SmtpMailer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Support relay started", strategy=app.state.resolution_service.policy.strategy.value)
    try:
        yield
    finally:
        # release every waiter still blocked on a callback, then drop the HTTP pool
        released = app.state.registry.close()
        await app.state.hubspot.aclose()
        logger.info("Support relay stopped", released_waiters=released)


def create_app(
    settings: Optional[Settings] = None,
    *,
    registry: Optional[PendingWaiterRegistry] = None,
    mailer: Optional[Mailer] = None,
    hubspot: Optional[HubSpotConversationsClient] = None,
    metrics: Optional[MetricsCollector] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, json_logs=settings.json_logs)

    app = FastAPI(
        title="Support Relay API",
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )

    # Wiring: one registry per app, shared by the correlator and the callback route
    registry = registry or PendingWaiterRegistry()
    metrics = metrics or MetricsCollector()
    hubspot = hubspot or HubSpotConversationsClient(
        access_token=settings.HUBSPOT_ACCESS_TOKEN,
        inbox_id=settings.HUBSPOT_INBOX_ID,
        base_url=settings.HUBSPOT_API_BASE_URL,
        timeout=settings.HUBSPOT_TIMEOUT_SECONDS,
    )
    mailer = mailer or SmtpMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASS,
        secure=settings.SMTP_SECURE,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
    )
    resolution_service = ResolutionService(
        policy=ResolutionPolicy.from_settings(settings),
        correlator=PushCorrelator(registry),
        poller=PollResolver(hubspot),
        annotations=hubspot,
        metrics=metrics,
    )

    app.state.settings = settings
    app.state.registry = registry
    app.state.metrics = metrics
    app.state.hubspot = hubspot
    app.state.callback_receiver = CallbackReceiver(registry, signing_secret=settings.CALLBACK_SIGNING_SECRET)
    app.state.resolution_service = resolution_service
    app.state.ticket_service = SupportTicketService(
        mailer=mailer,
        resolver=resolution_service,
        bcc_address=settings.HUBSPOT_BCC_EMAIL,
        required_config={
            "HUBSPOT_ACCESS_TOKEN": settings.HUBSPOT_ACCESS_TOKEN,
            "HUBSPOT_INBOX_ID": settings.HUBSPOT_INBOX_ID,
        },
    )

    # X-Request-ID → request.state.request_id + log context
    app.add_middleware(RequestIdMiddleware)

    # Routers
    app.include_router(health_router)
    app.include_router(callbacks_router)
    app.include_router(support_router)

    # Centralized error handling → {code, message, details?, correlation_id?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": "Support Relay API",
            "docs": "/docs",
            "health": "/health",
        }

    return app
