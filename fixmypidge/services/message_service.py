"""Append-only message thread of a case."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fixmypidge.core.exceptions import ValidationError
from fixmypidge.db.enums import SenderType
from fixmypidge.db.models import Case, Message
from fixmypidge.services import case_service

_TICK = timedelta(microseconds=1)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_message_timestamp(db: Session, case_id) -> datetime:
    """Now, or just after the latest message of the case if the clock lags."""
    now = datetime.now(timezone.utc)
    latest = db.execute(
        select(func.max(Message.created_at)).where(Message.case_id == case_id)
    ).scalar_one_or_none()
    if latest is None:
        return now
    latest = _as_utc(latest)
    return now if now > latest else latest + _TICK


def add_message(
    db: Session,
    case: Case,
    *,
    content: str,
    sender_type: SenderType,
    sender_id: str | None = None,
) -> Message:
    """
    Append a message to the case thread. Does not commit.

    Never changes the case status; only bumps updated_at.
    """
    if not content or not content.strip():
        raise ValidationError("Message content must not be empty")

    message = Message(
        case_id=case.id,
        content=content,
        sender_type=sender_type.value,
        sender_id=sender_id,
        created_at=next_message_timestamp(db, case.id),
    )
    db.add(message)
    case_service.touch(case)
    db.add(case)
    db.flush()
    return message
