"""Photo upload and case/message association."""

from __future__ import annotations

import io
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fixmypidge.core.exceptions import ValidationError
from fixmypidge.db.models import Case, CasePhoto, Message
from fixmypidge.services import storage_service

logger = logging.getLogger(__name__)


def ensure_message_in_case(db: Session, case: Case, message_id: UUID) -> Message:
    """A photo may only reference a message of its own case."""
    message = db.execute(
        select(Message).where(Message.id == message_id)
    ).scalar_one_or_none()
    if message is None or message.case_id != case.id:
        raise ValidationError("Message does not belong to this case")
    return message


def get_photo_by_storage_key(db: Session, storage_key: str) -> CasePhoto | None:
    return db.execute(
        select(CasePhoto).where(CasePhoto.storage_key == storage_key)
    ).scalars().first()


def create_photo(
    db: Session,
    case: Case,
    *,
    photo_url: str,
    message_id: UUID | None = None,
    storage_key: str | None = None,
    content_type: str | None = None,
    file_size: int | None = None,
) -> CasePhoto:
    """Insert a photo row and commit."""
    if message_id is not None:
        ensure_message_in_case(db, case, message_id)

    photo = CasePhoto(
        case_id=case.id,
        message_id=message_id,
        photo_url=photo_url,
        storage_key=storage_key,
        content_type=content_type,
        file_size=file_size,
    )
    db.add(photo)
    db.commit()
    db.refresh(photo)
    return photo


def upload_photo(
    db: Session,
    case: Case,
    *,
    filename: str,
    content_type: str,
    data: bytes,
    message_id: UUID | None = None,
) -> CasePhoto:
    """
    Validate, store the binary, then record the photo.

    The message link is checked before anything is written to storage.
    """
    storage_service.validate_photo(filename, content_type, len(data))
    if message_id is not None:
        ensure_message_in_case(db, case, message_id)

    storage_key = storage_service.build_storage_key(case.id, filename)
    url = storage_service.store_file(storage_key, io.BytesIO(data), content_type)
    photo = create_photo(
        db,
        case,
        photo_url=url,
        message_id=message_id,
        storage_key=storage_key,
        content_type=content_type,
        file_size=len(data),
    )
    logger.info("Photo stored case_id=%s photo_id=%s", case.id, photo.id)
    return photo
