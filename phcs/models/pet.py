"""Pet profile model."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phcs.db.base import Base
from phcs.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from phcs.models import Owner

DEFAULT_SPECIES = "Unknown"


class Pet(TimestampMixin, Base):
    """Animal linked to an owner."""

    __tablename__ = "pets"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("owners.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    species: Mapped[str] = mapped_column(
        String(120), nullable=False, default=DEFAULT_SPECIES
    )
    breed: Mapped[str | None] = mapped_column(String(120))
    color: Mapped[str | None] = mapped_column(String(120))
    age_years: Mapped[int | None] = mapped_column(Integer())
    health_notes: Mapped[str | None] = mapped_column(String(2048))

    owner: Mapped["Owner"] = relationship("Owner", back_populates="pets")
