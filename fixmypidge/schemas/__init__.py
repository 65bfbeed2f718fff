"""Pydantic schemas for API request/response models."""

from fixmypidge.schemas.case import (
    CaseCreate,
    CaseRead,
    Location,
    MessageCreate,
    MessageRead,
    PhotoRead,
)
from fixmypidge.schemas.webhook import (
    CaseStatusUpdateEvent,
    ExpertMessageEvent,
    ExpertMessagePayload,
    InboundEvent,
    WebhookAck,
    inbound_event_adapter,
)

__all__ = [
    "CaseCreate",
    "CaseRead",
    "CaseStatusUpdateEvent",
    "ExpertMessageEvent",
    "ExpertMessagePayload",
    "InboundEvent",
    "Location",
    "MessageCreate",
    "MessageRead",
    "PhotoRead",
    "WebhookAck",
    "inbound_event_adapter",
]
