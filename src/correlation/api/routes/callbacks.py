from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from src.correlation.api.dependencies import get_callback_receiver
from src.correlation.api.schemas import CallbackAck, CallbackPayload
from src.correlation.application.callback_receiver import CallbackReceiver

router = APIRouter(tags=["Correlation: Callbacks"])


@router.post("/api/correlation/callbacks", response_model=CallbackAck)
async def receive_callback(
    request: Request,
    x_hub_signature_256: str | None = Header(None),
    receiver: CallbackReceiver = Depends(get_callback_receiver),
):
    raw = await request.body()

    if not receiver.authenticate(raw, x_hub_signature_256):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_signature")

    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_json")

    try:
        payload = CallbackPayload.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False, include_context=False))

    matched = receiver.deliver(payload.correlation_key, payload.resource_id)
    return CallbackAck(ok=True, matched=matched)
