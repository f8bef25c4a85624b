"""Commit reviewed import records as owners, pets and cases.

Rows are committed one at a time. Each storage call is atomic on its own and
no transaction spans the batch, so a failing row never undoes or blocks the
rows around it.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from phcs.models.case import SourceSystem
from phcs.models.pet import DEFAULT_SPECIES
from phcs.schemas.case_import import NormalizedCaseRecord
from phcs.security.redact import mask_phone
from phcs.services import case_service, owner_service, pet_service
from phcs.services.import_errors import (
    ImportPersistenceError,
    ImportPipelineError,
    RecordValidationError,
)
from phcs.services.import_sources import DEFAULT_STATUS
from phcs.services.import_validation import ensure_valid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerRef:
    """Identity of an owner found in storage."""

    id: Any
    name: str
    phone: str | None = None


class CaseImportStore(Protocol):
    """Storage operations the committer depends on."""

    async def find_owner_by_phone_or_name(
        self, phone: str | None, name: str | None
    ) -> OwnerRef | None: ...

    async def create_owner(
        self, *, name: str, phone: str | None, email: str | None
    ) -> Any | None: ...

    async def create_pet(
        self,
        *,
        owner_id: Any,
        name: str,
        species: str,
        breed: str | None,
        health_notes: str | None,
    ) -> Any: ...

    async def create_case(self, **fields: Any) -> Any: ...


class SqlAlchemyCaseImportStore:
    """``CaseImportStore`` backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _fail(self, action: str, exc: SQLAlchemyError) -> ImportPersistenceError:
        await self.session.rollback()
        logger.warning("Import storage failure while trying to %s: %s", action, exc)
        return ImportPersistenceError(f"Failed to {action}: {exc.__class__.__name__}")

    async def find_owner_by_phone_or_name(
        self, phone: str | None, name: str | None
    ) -> OwnerRef | None:
        try:
            owner = await owner_service.find_owner_by_phone_or_name(
                self.session, phone=phone, name=name
            )
        except SQLAlchemyError as exc:
            raise await self._fail("look up owner", exc) from exc
        if owner is None:
            return None
        return OwnerRef(id=owner.id, name=owner.name, phone=owner.phone)

    async def create_owner(
        self, *, name: str, phone: str | None, email: str | None
    ) -> uuid.UUID | None:
        try:
            owner = await owner_service.create_owner(
                self.session, name=name, phone=phone, email=email
            )
            stored = await owner_service.get_owner(self.session, owner_id=owner.id)
        except SQLAlchemyError as exc:
            raise await self._fail("create owner", exc) from exc
        return stored.id if stored is not None else None

    async def create_pet(
        self,
        *,
        owner_id: uuid.UUID,
        name: str,
        species: str,
        breed: str | None,
        health_notes: str | None,
    ) -> uuid.UUID:
        try:
            pet = await pet_service.create_pet(
                self.session,
                owner_id=owner_id,
                name=name,
                species=species,
                breed=breed,
                health_notes=health_notes,
            )
        except SQLAlchemyError as exc:
            raise await self._fail("create pet", exc) from exc
        return pet.id

    async def create_case(self, **fields: Any) -> uuid.UUID:
        try:
            case = await case_service.create_case(self.session, **fields)
        except SQLAlchemyError as exc:
            raise await self._fail("create case", exc) from exc
        return case.id


@dataclass
class ImportCommitResult:
    """Counts and row errors for one committed batch."""

    total_records: int
    imported_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    errors: list[str] = field(default_factory=list)
    case_ids: list[Any] = field(default_factory=list)

    def imported(self, case_id: Any) -> None:
        self.imported_count += 1
        self.case_ids.append(case_id)

    def skip(self, row: int, messages: list[str]) -> None:
        self.skipped_count += 1
        self.errors.append(f"Row {row}: {'; '.join(messages)}")

    def fail(self, row: int, message: str) -> None:
        self.failed_count += 1
        self.errors.append(f"Row {row}: {message}")

    @property
    def message(self) -> str:
        return f"Imported {self.imported_count} of {self.total_records} records"


def _optional(value: str) -> str | None:
    value = value.strip()
    return value or None


def _source_value(record: NormalizedCaseRecord) -> str:
    try:
        return SourceSystem(record.source_system.strip().lower()).value
    except ValueError:
        return (record.record_source or SourceSystem.MANUAL).value


async def commit_record(store: CaseImportStore, record: NormalizedCaseRecord) -> Any:
    """Find or create the owner, add the pet when named, then create the case."""
    owner_name = record.owner_name.strip()
    owner_phone = _optional(record.owner_phone)

    owner = await store.find_owner_by_phone_or_name(owner_phone, owner_name)
    if owner is not None:
        owner_id = owner.id
    else:
        owner_id = await store.create_owner(
            name=owner_name,
            phone=owner_phone,
            email=_optional(record.owner_email),
        )
        if owner_id is None:
            raise ImportPersistenceError("Failed to create/find owner")
        logger.info("Created owner %s (%s)", owner_id, mask_phone(owner_phone))

    pet_id = None
    pet_name = record.pet_name.strip()
    if pet_name:
        pet_id = await store.create_pet(
            owner_id=owner_id,
            name=pet_name,
            species=record.pet_species.strip() or DEFAULT_SPECIES,
            breed=_optional(record.breed),
            health_notes=_optional(record.pet_details),
        )

    return await store.create_case(
        owner_id=owner_id,
        pet_id=pet_id,
        service_type=record.service_type.strip().lower(),
        status=record.status.strip().lower() or DEFAULT_STATUS,
        initial_request=_optional(record.initial_request),
        pet_details=_optional(record.pet_details),
        notes=_optional(record.notes),
        source_system=_source_value(record),
    )


async def commit_records(
    store: CaseImportStore,
    records: Iterable[NormalizedCaseRecord],
) -> ImportCommitResult:
    """Persist approved records, collecting per-row outcomes.

    Validation is re-run on every record so edits made after the preview are
    judged by their current values. Rows are numbered from their preview
    ``_index`` (or list position) plus one.
    """
    records = list(records)
    if not records:
        raise ValueError("No records to import")

    result = ImportCommitResult(total_records=len(records))
    for position, record in enumerate(records):
        row = (record.index if record.index is not None else position) + 1
        try:
            ensure_valid(record)
        except RecordValidationError as exc:
            result.skip(row, exc.errors)
            continue
        try:
            case_id = await commit_record(store, record)
        except ImportPipelineError as exc:
            result.fail(row, str(exc))
        except Exception as exc:  # one row never aborts the batch
            logger.exception("Unexpected failure importing row %s", row)
            result.fail(row, str(exc) or exc.__class__.__name__)
        else:
            result.imported(case_id)

    logger.info(
        "Case import committed: total=%s imported=%s skipped=%s failed=%s",
        result.total_records,
        result.imported_count,
        result.skipped_count,
        result.failed_count,
    )
    return result


__all__ = [
    "CaseImportStore",
    "ImportCommitResult",
    "OwnerRef",
    "SqlAlchemyCaseImportStore",
    "commit_record",
    "commit_records",
]
