"""Case desk API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from phcs.api import deps
from phcs.models.case import Case, SourceSystem
from phcs.schemas.case import (
    CaseCreate,
    CaseDetail,
    CaseNoteCreate,
    CaseNoteRead,
    CaseRead,
    CaseUpdate,
)
from phcs.schemas.case_import import NormalizedCaseRecord
from phcs.services import case_service
from phcs.services.import_commit_service import SqlAlchemyCaseImportStore, commit_record
from phcs.services.import_errors import ImportPersistenceError

router = APIRouter()


async def _get_case_or_404(
    session: AsyncSession, case_id: uuid.UUID, *, include_deleted: bool = False
) -> Case:
    case = await case_service.get_case(
        session, case_id=case_id, include_deleted=include_deleted
    )
    if case is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Case not found"
        )
    return case


@router.get("", response_model=list[CaseRead], summary="List cases")
async def list_cases(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    status_filter: str | None = Query(default=None, alias="status"),
    service_type: str | None = Query(default=None),
    skip: int = 0,
    limit: int = 50,
) -> list[CaseRead]:
    """Return active cases, newest first."""
    cases = await case_service.list_cases(
        session,
        status=status_filter,
        service_type=service_type,
        skip=skip,
        limit=min(limit, 100),
    )
    return [CaseRead.model_validate(case) for case in cases]


@router.post(
    "",
    response_model=CaseDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create case",
)
async def create_case(
    payload: CaseCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> CaseDetail:
    """Open a case, reusing the owner with the same phone (or name) when one exists."""
    record = NormalizedCaseRecord(
        **payload.model_dump(), source_system=SourceSystem.MANUAL.value
    )
    try:
        case_id = await commit_record(SqlAlchemyCaseImportStore(session), record)
    except ImportPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    case = await _get_case_or_404(session, case_id)
    return CaseDetail.model_validate(case)


@router.get("/deleted", response_model=list[CaseRead], summary="List deleted cases")
async def list_deleted_cases(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    skip: int = 0,
    limit: int = 50,
) -> list[CaseRead]:
    cases = await case_service.list_deleted_cases(
        session, skip=skip, limit=min(limit, 100)
    )
    return [CaseRead.model_validate(case) for case in cases]


@router.get("/{case_id}", response_model=CaseDetail, summary="Get case")
async def get_case(
    case_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> CaseDetail:
    """Fetch a single case with its notes."""
    case = await _get_case_or_404(session, case_id)
    return CaseDetail.model_validate(case)


@router.patch("/{case_id}", response_model=CaseDetail, summary="Update case")
async def update_case(
    case_id: uuid.UUID,
    payload: CaseUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> CaseDetail:
    """Change status or notes; completing a case records when it closed."""
    case = await _get_case_or_404(session, case_id)
    updated = await case_service.update_case(
        session, case=case, status=payload.status, notes=payload.notes
    )
    return CaseDetail.model_validate(updated)


@router.delete("/{case_id}", response_model=CaseDetail, summary="Soft delete case")
async def delete_case(
    case_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> CaseDetail:
    case = await _get_case_or_404(session, case_id)
    deleted = await case_service.soft_delete_case(session, case=case)
    return CaseDetail.model_validate(deleted)


@router.post(
    "/{case_id}/restore", response_model=CaseDetail, summary="Restore deleted case"
)
async def restore_case(
    case_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> CaseDetail:
    case = await _get_case_or_404(session, case_id, include_deleted=True)
    if not case.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Case is not deleted"
        )
    restored = await case_service.restore_case(session, case=case)
    return CaseDetail.model_validate(restored)


@router.get(
    "/{case_id}/notes", response_model=list[CaseNoteRead], summary="List case notes"
)
async def list_case_notes(
    case_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[CaseNoteRead]:
    await _get_case_or_404(session, case_id)
    notes = await case_service.list_case_notes(session, case_id=case_id)
    return [CaseNoteRead.model_validate(note) for note in notes]


@router.post(
    "/{case_id}/notes",
    response_model=CaseNoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add case note",
)
async def add_case_note(
    case_id: uuid.UUID,
    payload: CaseNoteCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> CaseNoteRead:
    """Attach a staff note to a case."""
    await _get_case_or_404(session, case_id)
    note = await case_service.add_case_note(
        session, case_id=case_id, text=payload.text, author=payload.author
    )
    return CaseNoteRead.model_validate(note)
