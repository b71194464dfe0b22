"""Callback DTOs."""

from pydantic import BaseModel, ConfigDict, Field


class CallbackPayload(BaseModel):
    """Third-party notification that a resource exists for a correlation key."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    correlation_key: str = Field(alias="correlationKey", min_length=1)
    resource_id: str = Field(alias="resourceId", min_length=1)


class CallbackAck(BaseModel):
    """Always returned with 200 so the sender never retries."""
    ok: bool = True
    matched: bool
