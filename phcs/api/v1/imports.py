"""Bulk case import API."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from phcs.api import deps
from phcs.core.config import get_settings
from phcs.schemas.case_import import (
    ImportConfirmRequest,
    ImportConfirmResponse,
    ImportPreviewResponse,
    ImportValidateRequest,
    ImportValidateResponse,
)
from phcs.services.import_commit_service import (
    SqlAlchemyCaseImportStore,
    commit_records,
)
from phcs.services.import_preview_service import build_preview
from phcs.services.import_validation import revalidate_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/import")


@router.post(
    "/preview",
    response_model=ImportPreviewResponse,
    summary="Preview uploaded case files",
)
async def preview_import(
    files: Annotated[list[UploadFile] | None, File()] = None,
) -> ImportPreviewResponse:
    """Parse, map and validate uploaded files without writing anything."""
    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded"
        )
    settings = get_settings()
    uploads: list[tuple[str, bytes]] = []
    for upload in files:
        uploads.append((upload.filename or "upload", await upload.read()))
    return build_preview(uploads, max_bytes=settings.import_max_file_bytes)


@router.post(
    "/validate",
    response_model=ImportValidateResponse,
    summary="Re-validate edited import records",
)
async def validate_import(payload: ImportValidateRequest) -> ImportValidateResponse:
    """Recompute errors for records edited after the preview."""
    records = [revalidate_record(record) for record in payload.records]
    invalid = sum(1 for record in records if record.has_errors)
    return ImportValidateResponse(
        records=records,
        valid_count=len(records) - invalid,
        invalid_count=invalid,
    )


@router.post(
    "/confirm",
    response_model=ImportConfirmResponse,
    summary="Commit reviewed import records",
)
async def confirm_import(
    payload: ImportConfirmRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> ImportConfirmResponse:
    """Create owners, pets and cases for every valid record."""
    try:
        result = await commit_records(
            SqlAlchemyCaseImportStore(session), payload.import_data
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    settings = get_settings()
    errors = result.errors
    if len(errors) > settings.import_max_errors:
        logger.warning(
            "Truncating import error list from %s to %s entries",
            len(errors),
            settings.import_max_errors,
        )
        errors = errors[: settings.import_max_errors]
    return ImportConfirmResponse(
        imported_count=result.imported_count,
        total_records=result.total_records,
        skipped_count=result.skipped_count,
        failed_count=result.failed_count,
        errors=errors,
        message=result.message,
    )
