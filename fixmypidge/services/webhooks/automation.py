"""Automation pipeline webhook handler (expert messages and status updates)."""

from __future__ import annotations

import json
import logging
from typing import Any

import pydantic
from fastapi import Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fixmypidge.core.case_lifecycle import resolve_transition
from fixmypidge.core.config import settings
from fixmypidge.core.exceptions import (
    DependencyError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from fixmypidge.core.structured_logging import build_log_context
from fixmypidge.db.enums import SenderType, UNKNOWN_EXPERT_ID
from fixmypidge.db.models import Case
from fixmypidge.schemas.webhook import (
    CaseStatusUpdateEvent,
    ExpertMessageEvent,
    inbound_event_adapter,
)
from fixmypidge.services import case_service, idempotency_service, message_service
from fixmypidge.services.webhooks.auth import WEBHOOK_SECRET_HEADER, verify_webhook_secret
from fixmypidge.services.webhooks.base import WebhookAckDict

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"


def parse_event(payload: Any) -> ExpertMessageEvent | CaseStatusUpdateEvent:
    """Validate a raw body into one of the two known event variants."""
    try:
        return inbound_event_adapter.validate_python(payload)
    except pydantic.ValidationError as exc:
        errors = exc.errors()
        first = errors[0] if errors else {}
        if first.get("type") in ("union_tag_invalid", "union_tag_not_found"):
            raise ValidationError("Unknown event type")
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"Invalid event payload: {location or 'body'}")


def _get_case(db: Session, event) -> Case:
    case = case_service.get_case(db, event.case_id)
    if case is None:
        raise NotFoundError("Case not found")
    return case


def _apply_expert_message(db: Session, event: ExpertMessageEvent) -> None:
    case = _get_case(db, event)
    # Resolve the transition before inserting so a rejected status leaves no message behind
    if event.status_update is not None:
        resolve_transition(case.status, event.status_update)

    message_service.add_message(
        db,
        case,
        content=event.message.content,
        sender_type=SenderType.EXPERT,
        sender_id=event.message.expert_id or UNKNOWN_EXPERT_ID,
    )
    if event.status_update is not None:
        case_service.apply_status(db, case, event.status_update)


def _apply_status_update(db: Session, event: CaseStatusUpdateEvent) -> None:
    case = _get_case(db, event)
    case_service.apply_status(db, case, event.status_update)


def process_automation_event(
    db: Session,
    event: ExpertMessageEvent | CaseStatusUpdateEvent,
    *,
    idempotency_key: str | None = None,
) -> WebhookAckDict:
    """
    Apply one inbound event in a single transaction.

    The message, the status change and the delivery record commit together;
    any failure rolls all of them back. A redelivered event is acknowledged
    without touching the store.
    """
    key = idempotency_service.resolve_key(event, idempotency_key)
    log_context = build_log_context(case_id=str(event.case_id), event=event.event)

    try:
        if idempotency_service.is_processed(db, key):
            logger.info("Duplicate automation event ignored", extra=log_context)
            return {"success": True, "duplicate": True}

        if isinstance(event, ExpertMessageEvent):
            _apply_expert_message(db, event)
        elif isinstance(event, CaseStatusUpdateEvent):
            _apply_status_update(db, event)
        else:
            raise ValidationError("Unknown event type")

        idempotency_service.record_delivery(db, key, event.event, event.case_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        if idempotency_service.is_processed(db, key):
            logger.info("Concurrent duplicate automation event ignored", extra=log_context)
            return {"success": True, "duplicate": True}
        logger.exception("Automation event failed to persist", extra=log_context)
        raise DependencyError()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Automation event failed to persist", extra=log_context)
        raise DependencyError()
    except (ValidationError, NotFoundError):
        db.rollback()
        raise

    logger.info("Automation event applied", extra=log_context)
    return {"success": True, "duplicate": False}


class AutomationWebhookHandler:
    async def handle(self, request: Request, db: Session, **kwargs) -> WebhookAckDict:
        # Authenticate before reading the body or touching the store
        verify_webhook_secret(request.headers.get(WEBHOOK_SECRET_HEADER))

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                payload_size = int(content_length)
            except ValueError:
                payload_size = None
            if payload_size and payload_size > settings.WEBHOOK_MAX_PAYLOAD_BYTES:
                raise PayloadTooLargeError()

        body = await request.body()
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("Invalid JSON")

        event = parse_event(payload)
        return process_automation_event(
            db,
            event,
            idempotency_key=request.headers.get(IDEMPOTENCY_HEADER),
        )
