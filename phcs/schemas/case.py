"""Pydantic schemas for the case desk."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from phcs.models.case import CaseStatus, ServiceType


class OwnerSummary(BaseModel):
    """Owner contact details shown alongside a case."""

    id: uuid.UUID
    name: str
    phone: str | None = None
    email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PetSummary(BaseModel):
    """Pet details shown alongside a case."""

    id: uuid.UUID
    name: str
    species: str
    breed: str | None = None
    health_notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CaseNoteCreate(BaseModel):
    """Payload for adding a note to a case."""

    text: str = Field(min_length=1)
    author: str | None = None


class CaseNoteRead(BaseModel):
    """Serialized case note."""

    id: uuid.UUID
    case_id: uuid.UUID
    text: str
    author: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CaseRead(BaseModel):
    """Serialized case for listings."""

    id: uuid.UUID
    owner_id: uuid.UUID
    pet_id: uuid.UUID | None = None
    service_type: str
    status: str
    initial_request: str | None = None
    pet_details: str | None = None
    notes: str | None = None
    source_system: str
    is_deleted: bool
    closed_at: datetime | None = None
    deleted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    owner: OwnerSummary | None = None
    pet: PetSummary | None = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CaseDetail(CaseRead):
    """Case with its note history."""

    case_notes: list[CaseNoteRead] = Field(default_factory=list)


class CaseCreate(BaseModel):
    """Payload for opening a case by hand."""

    owner_name: str = Field(min_length=2)
    owner_phone: str | None = None
    owner_email: str | None = None
    pet_name: str | None = None
    pet_species: str | None = None
    breed: str | None = None
    service_type: ServiceType
    status: CaseStatus = CaseStatus.OPEN
    initial_request: str | None = None
    pet_details: str | None = None
    notes: str | None = None


class CaseUpdate(BaseModel):
    """Mutable case fields."""

    status: CaseStatus | None = None
    notes: str | None = None
