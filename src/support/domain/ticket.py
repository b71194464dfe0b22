# src/support/domain/ticket.py
"""Support ticket entity and the plain-text artefacts derived from it."""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import List, Optional

from src.shared.exceptions import ValidationError

SUBJECT_MAX_LEN = 60
_OPTIONAL_TEXT = ("contact_name", "subject", "product_name", "version", "platform")


@dataclass(frozen=True)
class ConversationMessage:
    role: str
    content: str

    @property
    def speaker(self) -> str:
        return "Customer" if self.role == "user" else "Assistant"


@dataclass(frozen=True)
class SupportTicket:
    """A support request filed on behalf of a customer."""

    content: str
    contact_email: str
    contact_name: Optional[str] = None
    subject: Optional[str] = None
    conversation_history: List[ConversationMessage] = field(default_factory=list)
    product_name: Optional[str] = None
    version: Optional[str] = None
    platform: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", (self.content or "").strip())
        object.__setattr__(self, "contact_email", (self.contact_email or "").strip())
        for name in _OPTIONAL_TEXT:
            value = getattr(self, name)
            object.__setattr__(self, name, (value.strip() or None) if value else None)
        if not self.content:
            raise ValidationError("Missing required field: content", details={"field": "content"})
        if not self.contact_email:
            raise ValidationError("Missing required field: contactEmail", details={"field": "contactEmail"})

    @property
    def final_subject(self) -> str:
        """Given subject, else the first line of the content (truncated)."""
        if self.subject:
            return self.subject
        return self.content.split("\n", 1)[0][:SUBJECT_MAX_LEN]

    @property
    def product_label(self) -> str:
        if self.product_name:
            return f"{self.product_name} {self.version}" if self.version else self.product_name
        return f"version {self.version}" if self.version else "the product"

    @property
    def display_name(self) -> str:
        return self.contact_name or self.contact_email

    def render_body(self, footer: str) -> str:
        """Plain-text email body: metadata, the issue, and the transcript."""
        parts: List[str] = []
        if self.platform:
            parts.append(f"Platform: {self.platform}\n\n")
        parts.append(f"Customer reported the following issue with {self.product_label}:\n\n")
        parts.append(self.content)
        if self.conversation_history:
            parts.append("\n\n--- Conversation History ---\n")
            for msg in self.conversation_history:
                parts.append(f"\n[{msg.speaker}]: {msg.content}\n")
            parts.append("\n--- End Conversation ---")
        parts.append(f"\n\n---\n{footer}")
        return "".join(parts)

    def internal_note(self) -> InternalNote:
        """Tells agents which contact the thread really belongs to."""
        lead = (
            "This ticket was made using the support assistant, please press the cross next to the "
            "contact to disassociate, and associate with the following contact:"
        )
        text = f"{lead}\nName: {self.display_name}\nEmail: {self.contact_email}"
        html = (
            '<div style="font-family: Arial, sans-serif;">'
            f"<p>{escape(lead)}</p>"
            f"<p><strong>Name:</strong> {escape(self.display_name)}<br>"
            f"<strong>Email:</strong> {escape(self.contact_email)}</p>"
            "</div>"
        )
        return InternalNote(text=text, rich_text=html)


@dataclass(frozen=True)
class InternalNote:
    text: str
    rich_text: str


@dataclass(frozen=True)
class TicketReceipt:
    message_id: str
    forwarded_to: str
    thread_id: str
    strategy: str
