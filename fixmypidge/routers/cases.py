"""Cases router - reports, conversation thread and photos."""

import logging
from contextlib import contextmanager
from typing import Annotated
from uuid import UUID

import anyio.to_thread
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fixmypidge.core.deps import get_current_actor, get_db
from fixmypidge.core.exceptions import DependencyError, NotFoundError, ValidationError
from fixmypidge.core.structured_logging import build_log_context
from fixmypidge.db.enums import SenderType
from fixmypidge.db.models import Case
from fixmypidge.schemas.case import CaseCreate, CaseRead, MessageCreate, MessageRead, PhotoRead
from fixmypidge.services import (
    automation_outbound_service,
    case_service,
    geocoding_service,
    message_service,
    photo_service,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(db: Session):
    """Roll back and surface store failures as a retryable error."""
    try:
        yield
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Store operation failed")
        raise DependencyError()


def _get_visible_case(db: Session, case_id: UUID, actor_id: str) -> Case:
    case = case_service.get_case(db, case_id, owner_id=actor_id)
    if case is None:
        raise NotFoundError("Case not found")
    return case


@router.get("", response_model=list[CaseRead])
def list_cases(
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """Cases of the current citizen, newest first, with photos and messages."""
    with _store_errors(db):
        cases = case_service.list_cases(db, actor_id)
        return [CaseRead.from_case(case) for case in cases]


@router.get("/{case_id}", response_model=CaseRead)
def get_case(
    case_id: UUID,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    with _store_errors(db):
        return CaseRead.from_case(_get_visible_case(db, case_id, actor_id))


@router.post("", response_model=CaseRead, status_code=201)
async def create_case(
    data: CaseCreate,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """
    Report a bird.

    The case is committed first; the case_created notification is then
    dispatched in the background and cannot fail this request.
    """
    if data.location and not data.address:
        # The geocoder is a blocking HTTP call; keep it off the event loop
        address = await anyio.to_thread.run_sync(
            geocoding_service.reverse_geocode, data.location.lat, data.location.lng
        )
        data = data.model_copy(update={"address": address})

    with _store_errors(db):
        case = case_service.create_case(db, actor_id, data)
        payload = automation_outbound_service.build_case_created_payload(case)
        response = CaseRead.from_case(case)

    automation_outbound_service.dispatch_event(payload)
    return response


@router.post("/{case_id}/messages", response_model=MessageRead, status_code=201)
async def send_message(
    case_id: UUID,
    data: MessageCreate,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """Append a citizen message. Never changes the case status."""
    with _store_errors(db):
        case = _get_visible_case(db, case_id, actor_id)
        message = message_service.add_message(
            db,
            case,
            content=data.content,
            sender_type=SenderType.CITIZEN,
            sender_id=actor_id,
        )
        db.commit()
        db.refresh(message)
        payload = automation_outbound_service.build_message_sent_payload(message)
        response = MessageRead.model_validate(message)

    logger.info(
        "Citizen message stored",
        extra=build_log_context(case_id=str(case_id), actor_id=actor_id),
    )
    automation_outbound_service.dispatch_event(payload)
    return response


@router.post("/{case_id}/photos", response_model=PhotoRead, status_code=201)
async def upload_photo(
    case_id: UUID,
    file: Annotated[UploadFile, File()],
    message_id: Annotated[UUID | None, Form()] = None,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """Upload an image for a case, optionally attached to one of its messages."""
    data = await file.read()
    if not file.filename:
        raise ValidationError("Missing filename")

    with _store_errors(db):
        case = _get_visible_case(db, case_id, actor_id)
        photo = photo_service.upload_photo(
            db,
            case,
            filename=file.filename,
            content_type=file.content_type or "application/octet-stream",
            data=data,
            message_id=message_id,
        )
        return PhotoRead.model_validate(photo)
