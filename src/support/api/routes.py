from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.support.api.schemas import SupportTicketRequest, TicketReceiptResponse
from src.support.application.ticket_service import SupportTicketService
from src.support.domain.ticket import ConversationMessage, SupportTicket

router = APIRouter(tags=["Support: Tickets"])


def get_ticket_service(request: Request) -> SupportTicketService:
    return request.app.state.ticket_service


@router.post("/api/support/tickets", response_model=TicketReceiptResponse)
async def create_ticket(
    body: SupportTicketRequest,
    svc: SupportTicketService = Depends(get_ticket_service),
):
    ticket = SupportTicket(
        content=body.content,
        contact_email=body.contact_email,
        contact_name=body.contact_name,
        subject=body.subject,
        conversation_history=[ConversationMessage(role=m.role, content=m.content) for m in body.conversation_history],
        product_name=body.product_name,
        version=body.version,
        platform=body.platform,
    )
    receipt = await svc.submit(ticket, strategy=body.strategy)
    return TicketReceiptResponse(
        message_id=receipt.message_id,
        forwarded_to=receipt.forwarded_to,
        thread_id=receipt.thread_id,
        strategy=receipt.strategy,
    )
