"""Pydantic schemas for cases, messages and photos."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fixmypidge.db.enums import CaseCategory, CaseStatus, SenderType


class Location(BaseModel):
    """WGS84 point."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CaseCreate(BaseModel):
    """Request schema for reporting a bird."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    location: Location | None = None
    address: str | None = Field(None, max_length=500)
    category: CaseCategory | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()


class MessageCreate(BaseModel):
    """Request schema for a citizen message."""

    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v


class PhotoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    case_id: UUID
    message_id: UUID | None = None
    photo_url: str
    created_at: datetime


class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    case_id: UUID
    content: str
    sender_type: SenderType
    sender_id: str | None = None
    created_at: datetime
    photos: list[PhotoRead] = []


class CaseRead(BaseModel):
    """A case with its photos and its ordered message thread."""

    id: UUID
    owner_id: str
    title: str
    description: str | None = None
    location: Location | None = None
    address: str | None = None
    status: CaseStatus
    category: CaseCategory | None = None
    created_at: datetime
    updated_at: datetime
    photos: list[PhotoRead] = []
    messages: list[MessageRead] = []

    @classmethod
    def from_case(cls, case) -> "CaseRead":
        location = None
        if case.latitude is not None and case.longitude is not None:
            location = Location(lat=case.latitude, lng=case.longitude)
        return cls(
            id=case.id,
            owner_id=case.owner_id,
            title=case.title,
            description=case.description,
            location=location,
            address=case.address,
            status=case.status,
            category=case.category,
            created_at=case.created_at,
            updated_at=case.updated_at,
            photos=[PhotoRead.model_validate(p) for p in case.photos],
            messages=[MessageRead.model_validate(m) for m in case.messages],
        )
