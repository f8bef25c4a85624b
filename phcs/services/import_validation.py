"""Field validation for normalized import records."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from phcs.models.case import CaseStatus, ServiceType
from phcs.schemas.case_import import UNIFIED_FIELDS, NormalizedCaseRecord
from phcs.services.import_errors import RecordValidationError

REQUIRED_FIELDS: tuple[str, ...] = (
    "owner_name",
    "owner_phone",
    "pet_name",
    "service_type",
)
SERVICE_TYPES: tuple[str, ...] = tuple(item.value for item in ServiceType)
CASE_STATUSES: tuple[str, ...] = tuple(item.value for item in CaseStatus)

MIN_OWNER_NAME_LENGTH = 2
MIN_PHONE_DIGITS = 7

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NON_DIGIT = re.compile(r"\D")


def _text(values: Mapping[str, Any], field: str) -> str:
    value = values.get(field)
    if value is None:
        return ""
    return str(value)


def phone_digits(value: str) -> str:
    """Return only the digits of a phone number."""
    return _NON_DIGIT.sub("", value)


def validate_case_record(
    record: NormalizedCaseRecord | Mapping[str, Any],
) -> list[str]:
    """Return every rule violation for a record, in the order rules are checked.

    Provenance fields are ignored. A field is "present" when it holds a
    non-empty string; whitespace-only values are present but blank, so they
    fail both the required check and the field's own rule.
    """
    if isinstance(record, NormalizedCaseRecord):
        values: Mapping[str, Any] = record.field_values()
    else:
        values = record

    errors: list[str] = []

    for field in REQUIRED_FIELDS:
        if not _text(values, field).strip():
            errors.append(f"{field} is required")

    owner_name = _text(values, "owner_name")
    if owner_name and len(owner_name.strip()) < MIN_OWNER_NAME_LENGTH:
        errors.append(
            f"owner_name '{owner_name}' must be at least "
            f"{MIN_OWNER_NAME_LENGTH} characters"
        )

    owner_phone = _text(values, "owner_phone")
    if owner_phone and len(phone_digits(owner_phone)) < MIN_PHONE_DIGITS:
        errors.append(
            f"owner_phone '{owner_phone}' must contain at least "
            f"{MIN_PHONE_DIGITS} digits"
        )

    owner_email = _text(values, "owner_email")
    if owner_email and not _EMAIL_PATTERN.match(owner_email):
        errors.append(f"owner_email '{owner_email}' is not a valid email address")

    pet_name = _text(values, "pet_name")
    if pet_name and not pet_name.strip():
        errors.append("pet_name must not be blank")

    service_type = _text(values, "service_type")
    if service_type and service_type.strip().lower() not in SERVICE_TYPES:
        errors.append(
            f"service_type '{service_type}' is not supported; "
            f"expected one of: {', '.join(SERVICE_TYPES)}"
        )

    status = _text(values, "status")
    if status and status.strip().lower() not in CASE_STATUSES:
        errors.append(
            f"status '{status}' is not supported; "
            f"expected one of: {', '.join(CASE_STATUSES)}"
        )

    return errors


def revalidate_record(record: NormalizedCaseRecord) -> NormalizedCaseRecord:
    """Return a copy of ``record`` whose errors reflect its current values."""
    return record.model_copy(update={"errors": validate_case_record(record)})


def ensure_valid(record: NormalizedCaseRecord) -> NormalizedCaseRecord:
    """Return ``record`` unchanged or raise ``RecordValidationError``."""
    errors = validate_case_record(record)
    if errors:
        raise RecordValidationError(errors, index=record.index)
    return record


def apply_corrections(
    record: NormalizedCaseRecord, overrides: Mapping[str, Any]
) -> NormalizedCaseRecord:
    """Apply staff edits to a previewed record and validate the result.

    Only unified fields can be overridden; provenance keys and unknown keys
    are ignored.
    """
    values = record.field_values()
    for field, value in overrides.items():
        if field in UNIFIED_FIELDS:
            values[field] = value
    edited = NormalizedCaseRecord(
        **values,
        original_data=record.original_data,
        index=record.index,
        record_source=record.record_source,
    )
    return revalidate_record(edited)


__all__ = [
    "CASE_STATUSES",
    "REQUIRED_FIELDS",
    "SERVICE_TYPES",
    "apply_corrections",
    "ensure_valid",
    "phone_digits",
    "revalidate_record",
    "validate_case_record",
]
