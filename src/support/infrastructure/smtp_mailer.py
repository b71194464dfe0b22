"""SMTP transport for outbound support emails."""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from src.shared.exceptions import NotConfiguredError, UpstreamError
from src.shared.infrastructure.observability.logger import get_logger
from src.support.domain.protocols import Mailer, OutboundEmail

logger = get_logger(__name__)


class MailTransportError(UpstreamError):
    """Raised when the SMTP server rejects or cannot be reached."""
    code = "trigger_failed"


class SmtpMailer(Mailer):
    """
    Sends mail through a plain SMTP relay.

    smtplib is blocking, so each send runs on a worker thread. Port 465 style
    implicit TLS is used when ``secure`` is set, STARTTLS otherwise (when the
    server offers it).
    """

    def __init__(
        self,
        *,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        secure: bool = False,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._secure = secure
        self._timeout = timeout

    @property
    def sender(self) -> Optional[str]:
        return self._username

    async def send(self, email: OutboundEmail) -> str:
        """Send ``email``; returns the Message-ID header value."""
        if not self._host:
            raise NotConfiguredError("SMTP_HOST not configured")
        message = self._build(email)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP send failed", error=str(exc), host=self._host)
            raise MailTransportError(f"SMTP send failed: {exc}") from exc
        logger.info("Email sent", message_id=message["Message-ID"], bcc=bool(email.bcc))
        return str(message["Message-ID"])

    def _build(self, email: OutboundEmail) -> EmailMessage:
        message = EmailMessage()
        if self._username:
            message["From"] = self._username
        message["To"] = email.to
        if email.reply_to:
            message["Reply-To"] = email.reply_to
        if email.bcc:
            message["Bcc"] = email.bcc
        message["Subject"] = email.subject
        message["Message-ID"] = make_msgid()
        message.set_content(email.text)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self._secure:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout, context=context)
        else:
            server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        with server:
            if not self._secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()
            if self._username and self._password:
                server.login(self._username, self._password)
            # send_message strips the Bcc header but still delivers to it
            server.send_message(message)
