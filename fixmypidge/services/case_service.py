"""Case persistence and status lifecycle application."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from fixmypidge.core import case_lifecycle
from fixmypidge.db.enums import CaseStatus
from fixmypidge.db.models import Case, Message
from fixmypidge.schemas.case import CaseCreate
from fixmypidge.services import geocoding_service

logger = logging.getLogger(__name__)


def _with_details():
    return (
        selectinload(Case.photos),
        selectinload(Case.messages).selectinload(Message.photos),
    )


def create_case(db: Session, owner_id: str, data: CaseCreate) -> Case:
    """
    Insert a case in status `new` and commit.

    A location without an address is reverse geocoded; the geocoder never
    raises, it falls back to the raw coordinates.
    """
    latitude = data.location.lat if data.location else None
    longitude = data.location.lng if data.location else None
    address = data.address
    if data.location and not address:
        address = geocoding_service.reverse_geocode(latitude, longitude)

    case = Case(
        owner_id=owner_id,
        title=data.title,
        description=data.description,
        latitude=latitude,
        longitude=longitude,
        address=address,
        status=case_lifecycle.INITIAL_STATUS.value,
        category=data.category.value if data.category else None,
    )
    db.add(case)
    db.commit()
    db.refresh(case)
    logger.info("Case created case_id=%s", case.id)
    return case


def get_case(db: Session, case_id: UUID, owner_id: str | None = None) -> Case | None:
    """
    Fetch one case with photos and messages.

    With owner_id the lookup is restricted to the actor's own cases; a hidden
    case is reported exactly like a missing one.
    """
    stmt = select(Case).options(*_with_details()).where(Case.id == case_id)
    if owner_id is not None:
        stmt = stmt.where(Case.owner_id == owner_id)
    return db.execute(stmt).scalar_one_or_none()


def list_cases(db: Session, owner_id: str) -> list[Case]:
    """Cases visible to the actor, newest first."""
    stmt = (
        select(Case)
        .options(*_with_details())
        .where(Case.owner_id == owner_id)
        .order_by(Case.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def touch(case: Case) -> None:
    case.updated_at = datetime.now(timezone.utc)


def apply_status(db: Session, case: Case, target: str | CaseStatus) -> bool:
    """
    Move the case along its lifecycle. Does not commit.

    Returns True when the stored status changed. Raises ValidationError for
    unknown targets and regressions, leaving the case untouched.
    """
    new_status = case_lifecycle.resolve_transition(case.status, target)
    if new_status.value == case.status:
        logger.info(
            "Status update is a no-op case_id=%s status=%s requested=%s",
            case.id,
            case.status,
            case_lifecycle.parse_status(target).value,
        )
        return False

    previous = case.status
    case.status = new_status.value
    touch(case)
    db.add(case)
    logger.info("Case status changed case_id=%s %s -> %s", case.id, previous, new_status.value)
    return True
