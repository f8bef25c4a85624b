"""Pydantic schemas for bulk case import previews and commits."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from phcs.models.case import SourceSystem

UNIFIED_FIELDS: tuple[str, ...] = (
    "owner_name",
    "owner_phone",
    "owner_email",
    "pet_name",
    "pet_species",
    "pet_details",
    "breed",
    "initial_request",
    "service_type",
    "status",
    "notes",
    "source_system",
)


class PreviewFileStatus(str, enum.Enum):
    """Aggregate outcome of previewing one uploaded file."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class NormalizedCaseRecord(BaseModel):
    """One import row projected onto the unified case schema."""

    owner_name: str = ""
    owner_phone: str = ""
    owner_email: str = ""
    pet_name: str = ""
    pet_species: str = ""
    pet_details: str = ""
    breed: str = ""
    initial_request: str = ""
    service_type: str = ""
    status: str = ""
    notes: str = ""
    source_system: str = SourceSystem.MANUAL.value

    original_data: dict[str, Any] = Field(
        default_factory=dict, alias="_originalData"
    )
    index: int | None = Field(default=None, alias="_index")
    record_source: SourceSystem | None = Field(default=None, alias="_sourceSystem")
    errors: list[str] = Field(default_factory=list, alias="_errors")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator(*UNIFIED_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, enum.Enum):
            return str(value.value)
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def field_values(self) -> dict[str, str]:
        """Return only the unified fields, without provenance."""
        return {name: getattr(self, name) for name in UNIFIED_FIELDS}

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class PreviewFileResult(BaseModel):
    """Preview of one uploaded file."""

    file_name: str = Field(alias="fileName")
    source_system: SourceSystem | None = Field(default=None, alias="sourceSystem")
    status: PreviewFileStatus
    record_count: int = Field(default=0, alias="recordCount")
    records: list[NormalizedCaseRecord] = Field(default_factory=list)
    error: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class ImportPreviewResponse(BaseModel):
    """Response for the preview endpoint."""

    preview_data: list[PreviewFileResult] = Field(alias="previewData")
    total_records: int = Field(alias="totalRecords")

    model_config = ConfigDict(populate_by_name=True)


class ImportValidateRequest(BaseModel):
    """Edited records to run back through the validator."""

    records: list[NormalizedCaseRecord]


class ImportValidateResponse(BaseModel):
    """Records with freshly computed validation errors."""

    records: list[NormalizedCaseRecord]
    valid_count: int = Field(alias="validCount")
    invalid_count: int = Field(alias="invalidCount")

    model_config = ConfigDict(populate_by_name=True)


class ImportConfirmRequest(BaseModel):
    """Records approved by staff for import."""

    import_data: list[NormalizedCaseRecord] = Field(alias="importData")

    model_config = ConfigDict(populate_by_name=True)


class ImportConfirmResponse(BaseModel):
    """Summary of a committed import batch."""

    imported_count: int = Field(alias="importedCount")
    total_records: int = Field(alias="totalRecords")
    skipped_count: int = Field(default=0, alias="skippedCount")
    failed_count: int = Field(default=0, alias="failedCount")
    errors: list[str] = Field(default_factory=list)
    message: str

    model_config = ConfigDict(populate_by_name=True)
