"""De-duplication of inbound automation events (at-least-once delivery)."""

from __future__ import annotations

import hashlib
import json
import time
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fixmypidge.core.config import settings
from fixmypidge.db.models import WebhookDelivery
from fixmypidge.schemas.webhook import CaseStatusUpdateEvent, ExpertMessageEvent


def _time_bucket(now: float | None = None) -> int:
    window = max(1, settings.WEBHOOK_DEDUPE_WINDOW_SECONDS)
    return int((time.time() if now is None else now) // window)


def fingerprint_event(
    event: ExpertMessageEvent | CaseStatusUpdateEvent,
    *,
    now: float | None = None,
) -> str:
    """
    Content hash used when the caller supplies no idempotency key.

    Two deliveries of the same event inside one dedupe window collapse to the
    same fingerprint.
    """
    parts: dict[str, object] = {
        "event": event.event,
        "case_id": str(event.case_id),
        "status": event.status_update.value if event.status_update else None,
        "bucket": _time_bucket(now),
    }
    if isinstance(event, ExpertMessageEvent):
        parts["content"] = event.message.content
        parts["expert_id"] = event.message.expert_id
    digest = hashlib.sha256(json.dumps(parts, sort_keys=True).encode()).hexdigest()
    return f"fp:{digest}"


def resolve_key(
    event: ExpertMessageEvent | CaseStatusUpdateEvent,
    header_key: str | None = None,
) -> str:
    """Caller-supplied key (body, then header) or the content fingerprint."""
    supplied = event.idempotency_key or header_key
    if supplied and supplied.strip():
        return f"key:{supplied.strip()}"
    return fingerprint_event(event)


def is_processed(db: Session, key: str) -> bool:
    return (
        db.execute(
            select(WebhookDelivery.id).where(WebhookDelivery.idempotency_key == key)
        ).first()
        is not None
    )


def record_delivery(db: Session, key: str, event_type: str, case_id: UUID) -> WebhookDelivery:
    """Stage the delivery record; it commits together with the mutation."""
    delivery = WebhookDelivery(idempotency_key=key, event_type=event_type, case_id=case_id)
    db.add(delivery)
    return delivery
