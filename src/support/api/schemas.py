"""Support ticket DTOs."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.correlation.domain.value_objects import Strategy


class ConversationMessageIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = "user"
    content: str = ""


class SupportTicketRequest(BaseModel):
    """Body of POST /api/support/tickets (camelCase, as sent by the assistant)."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    content: str = Field(min_length=1, description="The message content to send.")
    contact_email: str = Field(alias="contactEmail", min_length=3)
    contact_name: Optional[str] = Field(default=None, alias="contactName")
    subject: Optional[str] = None
    conversation_history: List[ConversationMessageIn] = Field(default_factory=list, alias="conversationHistory")
    product_name: Optional[str] = Field(default=None, alias="productName")
    version: Optional[str] = None
    platform: Optional[str] = None
    strategy: Optional[Strategy] = Field(default=None, description="Override the configured correlation strategy")


class TicketReceiptResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Your support request has been sent to the support team. We will get back to you ASAP!"
    message_id: str = Field(serialization_alias="messageId")
    forwarded_to: str = Field(serialization_alias="forwardedTo")
    thread_id: str = Field(serialization_alias="hubspotThreadId")
    strategy: str
