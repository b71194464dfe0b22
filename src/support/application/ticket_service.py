"""
Support Ticket Service
Sends the support email with the help-desk inbox on BCC, locates the thread
the help desk creates from it, then leaves an internal note on that thread.
"""
from __future__ import annotations

from typing import Dict, Mapping, Optional

from src.correlation.application.resolution_service import ResolutionRequest, ResolutionService
from src.correlation.domain.value_objects import Strategy
from src.shared.exceptions import NotConfiguredError
from src.shared.infrastructure.observability.logger import get_logger
from src.support.domain.protocols import Mailer, OutboundEmail
from src.support.domain.ticket import SupportTicket, TicketReceipt

logger = get_logger(__name__)

FOOTER = "Support ticket created with the support assistant"


class SupportTicketService:
    def __init__(
        self,
        *,
        mailer: Mailer,
        resolver: ResolutionService,
        bcc_address: Optional[str],
        required_config: Optional[Mapping[str, Optional[str]]] = None,
    ) -> None:
        self._mailer = mailer
        self._resolver = resolver
        self._bcc = bcc_address
        self._required = dict(required_config or {})

    async def submit(self, ticket: SupportTicket, strategy: Optional[Strategy] = None) -> TicketReceipt:
        """
        File ``ticket``.

        The correlation key is the contact email and the subject is the hint
        used to tell threads apart when polling.

        Raises:
            NotConfiguredError: before anything is sent, if the help desk is not set up
            ResolutionFailure: the email failed or its thread was never found
            AnnotationFailedError: the thread was found but the note was rejected
        """
        self._preflight()
        subject = ticket.final_subject
        email = OutboundEmail(
            to=ticket.contact_email,
            subject=subject,
            text=ticket.render_body(FOOTER),
            reply_to=ticket.contact_email,
            bcc=self._bcc,
        )
        sent: Dict[str, str] = {}

        async def send_email() -> None:
            sent["message_id"] = await self._mailer.send(email)

        note = ticket.internal_note()
        chosen = Strategy(strategy or self._resolver.policy.strategy)
        thread_id = await self._resolver.resolve_and_annotate(
            ResolutionRequest(key=ticket.contact_email, trigger=send_email, subject_hint=subject),
            note.text,
            rich_text=note.rich_text,
            strategy=chosen,
        )
        logger.info("Support ticket filed", thread_id=thread_id, strategy=chosen.value)
        return TicketReceipt(
            message_id=sent.get("message_id", ""),
            forwarded_to=self._bcc or "",
            thread_id=thread_id,
            strategy=chosen.value,
        )

    def _preflight(self) -> None:
        missing = [name for name, value in {"HUBSPOT_BCC_EMAIL": self._bcc, **self._required}.items() if not value]
        if missing:
            raise NotConfiguredError(
                f"{', '.join(missing)} not configured",
                details={"missing": missing},
            )
