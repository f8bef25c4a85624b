"""Case desk service helpers."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from phcs.models.case import Case, CaseNote, CaseStatus, SourceSystem


def _base_case_query(*, deleted: bool = False) -> Select[tuple[Case]]:
    """Return a base selectable for cases with owner and pet loaded."""
    return (
        select(Case)
        .options(selectinload(Case.owner), selectinload(Case.pet))
        .where(Case.is_deleted.is_(deleted))
        .order_by(Case.created_at.desc())
    )


async def list_cases(
    session: AsyncSession,
    *,
    status: str | None = None,
    service_type: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> Sequence[Case]:
    """Return active (not deleted) cases, newest first."""
    stmt = _base_case_query()
    if status:
        stmt = stmt.where(Case.status == status.lower())
    if service_type:
        stmt = stmt.where(Case.service_type == service_type.lower())
    stmt = stmt.offset(skip).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().unique().all()


async def list_deleted_cases(
    session: AsyncSession,
    *,
    skip: int = 0,
    limit: int = 100,
) -> Sequence[Case]:
    """Return soft-deleted cases, newest first."""
    stmt = _base_case_query(deleted=True).offset(skip).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().unique().all()


async def get_case(
    session: AsyncSession,
    *,
    case_id: uuid.UUID,
    include_deleted: bool = False,
) -> Case | None:
    """Return a single case with its notes."""
    stmt = (
        select(Case)
        .options(
            selectinload(Case.owner),
            selectinload(Case.pet),
            selectinload(Case.case_notes),
        )
        .where(Case.id == case_id)
        .execution_options(populate_existing=True)
    )
    if not include_deleted:
        stmt = stmt.where(Case.is_deleted.is_(False))
    result = await session.execute(stmt)
    return result.scalars().unique().one_or_none()


async def create_case(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    pet_id: uuid.UUID | None,
    service_type: str,
    status: str = CaseStatus.OPEN.value,
    initial_request: str | None = None,
    pet_details: str | None = None,
    notes: str | None = None,
    source_system: str = SourceSystem.MANUAL.value,
) -> Case:
    """Insert a case row linked to an owner and optional pet."""
    case = Case(
        owner_id=owner_id,
        pet_id=pet_id,
        service_type=service_type,
        status=status,
        initial_request=initial_request,
        pet_details=pet_details,
        notes=notes,
        source_system=source_system,
        is_deleted=False,
        closed_at=datetime.now(UTC) if status == CaseStatus.COMPLETED.value else None,
    )
    session.add(case)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(case)
    return case


async def update_case(
    session: AsyncSession,
    *,
    case: Case,
    status: CaseStatus | None = None,
    notes: str | None = None,
) -> Case:
    """Apply status and notes changes; completing a case stamps ``closed_at``."""
    if status is not None:
        case.status = status.value
        if status is CaseStatus.COMPLETED:
            case.closed_at = datetime.now(UTC)
        else:
            case.closed_at = None
    if notes is not None:
        case.notes = notes

    session.add(case)
    await session.commit()
    return await get_case(session, case_id=case.id)  # type: ignore[return-value]


async def soft_delete_case(session: AsyncSession, *, case: Case) -> Case:
    """Flag a case as deleted without removing the row."""
    case.is_deleted = True
    case.deleted_at = datetime.now(UTC)
    session.add(case)
    await session.commit()
    return await get_case(  # type: ignore[return-value]
        session, case_id=case.id, include_deleted=True
    )


async def restore_case(session: AsyncSession, *, case: Case) -> Case:
    """Clear the deleted flag on a case."""
    case.is_deleted = False
    case.deleted_at = None
    session.add(case)
    await session.commit()
    return await get_case(session, case_id=case.id)  # type: ignore[return-value]


async def list_case_notes(
    session: AsyncSession, *, case_id: uuid.UUID
) -> Sequence[CaseNote]:
    """Return notes for a case, newest first."""
    result = await session.execute(
        select(CaseNote)
        .where(CaseNote.case_id == case_id)
        .order_by(CaseNote.created_at.desc())
    )
    return result.scalars().all()


async def add_case_note(
    session: AsyncSession,
    *,
    case_id: uuid.UUID,
    text: str,
    author: str | None = None,
) -> CaseNote:
    """Attach a note to a case."""
    note = CaseNote(case_id=case_id, text=text, author=author)
    session.add(note)
    await session.commit()
    await session.refresh(note)
    return note
