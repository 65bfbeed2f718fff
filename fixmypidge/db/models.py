"""SQLAlchemy ORM models for cases, their conversation thread and photos."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fixmypidge.db.base import Base
from fixmypidge.db.enums import DEFAULT_CASE_STATUS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Cases
# =============================================================================

class Case(Base):
    """
    A citizen report of a bird in distress.

    Owned by the reporting citizen (owner_id). Status is only ever changed
    through core.case_lifecycle, never deleted in normal operation.
    """
    __tablename__ = "cases"
    __table_args__ = (
        Index("idx_cases_owner_created", "owner_id", "created_at"),
        Index("idx_cases_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Geographic point (WGS84)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text(f"'{DEFAULT_CASE_STATUS.value}'"),
        default=DEFAULT_CASE_STATUS.value,
        nullable=False,
    )
    category: Mapped[str | None] = mapped_column(String(30), nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    messages: Mapped[list["Message"]] = relationship(
        back_populates="case",
        order_by="Message.created_at",
        cascade="all, delete-orphan",
    )
    photos: Mapped[list["CasePhoto"]] = relationship(
        back_populates="case",
        order_by="CasePhoto.created_at",
        cascade="all, delete-orphan",
    )


class Message(Base):
    """
    One turn of the conversation thread of a case.

    Append-only: rows are never updated or deleted. created_at is strictly
    increasing within a case (see message_service.add_message).
    """
    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_case_created", "case_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    sender_type: Mapped[str] = mapped_column(String(20), nullable=False)  # citizen | expert
    sender_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    case: Mapped["Case"] = relationship(back_populates="messages")
    photos: Mapped[list["CasePhoto"]] = relationship(
        back_populates="message",
        order_by="CasePhoto.created_at",
    )


class CasePhoto(Base):
    """
    An uploaded image attached to a case, optionally to one of its messages.

    The message link is a back-reference only and is fixed at creation.
    """
    __tablename__ = "case_photos"
    __table_args__ = (
        Index("idx_case_photos_case", "case_id"),
        Index("idx_case_photos_message", "message_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False
    )
    message_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("messages.id", ondelete="SET NULL"), nullable=True
    )
    photo_url: Mapped[str] = mapped_column(String(1024), nullable=False)

    # File metadata
    storage_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    case: Mapped["Case"] = relationship(back_populates="photos")
    message: Mapped["Message | None"] = relationship(back_populates="photos")


# =============================================================================
# Webhooks
# =============================================================================

class WebhookDelivery(Base):
    """
    Inbound automation events that have been applied.

    Committed in the same transaction as the mutation they caused, so a
    redelivered event finds its key here and is acknowledged without effect.
    """
    __tablename__ = "webhook_deliveries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    idempotency_key: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    case_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
