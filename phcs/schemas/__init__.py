"""Schema exports."""

from phcs.schemas.case import (
    CaseCreate,
    CaseDetail,
    CaseNoteCreate,
    CaseNoteRead,
    CaseRead,
    CaseUpdate,
    OwnerSummary,
    PetSummary,
)
from phcs.schemas.case_import import (
    UNIFIED_FIELDS,
    ImportConfirmRequest,
    ImportConfirmResponse,
    ImportPreviewResponse,
    ImportValidateRequest,
    ImportValidateResponse,
    NormalizedCaseRecord,
    PreviewFileResult,
    PreviewFileStatus,
)

__all__ = [
    "CaseCreate",
    "CaseDetail",
    "CaseNoteCreate",
    "CaseNoteRead",
    "CaseRead",
    "CaseUpdate",
    "ImportConfirmRequest",
    "ImportConfirmResponse",
    "ImportPreviewResponse",
    "ImportValidateRequest",
    "ImportValidateResponse",
    "NormalizedCaseRecord",
    "OwnerSummary",
    "PetSummary",
    "PreviewFileResult",
    "PreviewFileStatus",
    "UNIFIED_FIELDS",
]
