"""Service cases and their notes."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phcs.db.base import Base
from phcs.models.mixins import SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from phcs.models import Owner, Pet


class CaseStatus(str, enum.Enum):
    """Lifecycle states of a case."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class SourceSystem(str, enum.Enum):
    """External intake systems whose exports can be imported."""

    MANUAL = "manual"
    VOICEMAIL = "voicemail"
    WAITWHILE = "waitwhile"


class ServiceType(str, enum.Enum):
    """Services a case can request."""

    ADOPTION = "adoption"
    RESCUE = "rescue"
    MEDICAL = "medical"
    LOST_FOUND = "lost_found"
    SHELTER = "shelter"
    TRAINING = "training"
    GROOMING = "grooming"
    BOARDING = "boarding"
    OTHER = "other"


class Case(TimestampMixin, SoftDeleteMixin, Base):
    """One tracked service request for an owner and optionally a pet."""

    __tablename__ = "cases"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pet_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("pets.id", ondelete="SET NULL")
    )
    # Stored as plain strings: imported rows are validated case-insensitively
    # and lower-cased before insert.
    service_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=CaseStatus.OPEN.value, index=True
    )
    initial_request: Mapped[str | None] = mapped_column(Text())
    pet_details: Mapped[str | None] = mapped_column(Text())
    notes: Mapped[str | None] = mapped_column(Text())
    source_system: Mapped[str] = mapped_column(
        String(32), nullable=False, default=SourceSystem.MANUAL.value
    )
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    owner: Mapped["Owner"] = relationship("Owner", back_populates="cases")
    pet: Mapped["Pet | None"] = relationship("Pet")
    case_notes: Mapped[list["CaseNote"]] = relationship(
        "CaseNote",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="CaseNote.created_at.desc()",
    )


class CaseNote(TimestampMixin, Base):
    """Free-text note added to a case by staff."""

    __tablename__ = "case_notes"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    case_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(Text(), nullable=False)
    author: Mapped[str | None] = mapped_column(String(255))

    case: Mapped["Case"] = relationship("Case", back_populates="case_notes")
