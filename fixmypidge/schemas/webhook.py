"""Pydantic schemas for automation webhooks."""

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from fixmypidge.db.enums import CaseStatus


class ExpertMessagePayload(BaseModel):
    content: str = Field(..., min_length=1)
    expert_id: str | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v


class ExpertMessageEvent(BaseModel):
    """An expert reply, optionally moving the case to a new status."""

    event: Literal["expert_message"]
    case_id: UUID
    message: ExpertMessagePayload
    status_update: CaseStatus | None = None
    idempotency_key: str | None = Field(None, max_length=255)


class CaseStatusUpdateEvent(BaseModel):
    """A bare status change."""

    event: Literal["case_status_update"]
    case_id: UUID
    status_update: CaseStatus
    idempotency_key: str | None = Field(None, max_length=255)


InboundEvent = Annotated[
    Union[ExpertMessageEvent, CaseStatusUpdateEvent],
    Field(discriminator="event"),
]

inbound_event_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)


class WebhookAck(BaseModel):
    success: bool = True
    duplicate: bool = False
