"""Tests for import record validation and corrections."""

from __future__ import annotations

import pytest

from phcs.models.case import SourceSystem
from phcs.schemas.case_import import NormalizedCaseRecord
from phcs.services.import_errors import RecordValidationError
from phcs.services.import_validation import (
    apply_corrections,
    ensure_valid,
    revalidate_record,
    validate_case_record,
)


def _record(**overrides: object) -> NormalizedCaseRecord:
    values: dict[str, object] = {
        "owner_name": "Jane Doe",
        "owner_phone": "555-123-4567",
        "pet_name": "Rex",
        "service_type": "medical",
    }
    values.update(overrides)
    return NormalizedCaseRecord(**values)


def test_valid_record_has_no_errors() -> None:
    assert validate_case_record(_record()) == []


def test_empty_record_reports_every_required_field() -> None:
    assert validate_case_record(NormalizedCaseRecord()) == [
        "owner_name is required",
        "owner_phone is required",
        "pet_name is required",
        "service_type is required",
    ]


@pytest.mark.parametrize(
    ("phone", "valid"),
    [
        ("12345", False),
        ("123456", False),
        ("1234567", True),
        ("(555) 123-4567", True),
        ("ext. 12-34", False),
    ],
)
def test_phone_digit_boundary(phone: str, valid: bool) -> None:
    errors = validate_case_record(_record(owner_phone=phone))
    if valid:
        assert errors == []
    else:
        assert errors == [f"owner_phone '{phone}' must contain at least 7 digits"]


def test_owner_name_too_short() -> None:
    assert validate_case_record(_record(owner_name="J")) == [
        "owner_name 'J' must be at least 2 characters"
    ]


def test_whitespace_values_fail_required_and_field_rules() -> None:
    errors = validate_case_record(_record(owner_name="   ", pet_name="  "))
    assert errors == [
        "owner_name is required",
        "pet_name is required",
        "owner_name '   ' must be at least 2 characters",
        "pet_name must not be blank",
    ]


@pytest.mark.parametrize(
    "email", ["jane@example.com", "j.doe+pets@mail.example.org"]
)
def test_valid_email(email: str) -> None:
    assert validate_case_record(_record(owner_email=email)) == []


@pytest.mark.parametrize("email", ["jane@", "jane.example.com", "jane doe@x.io"])
def test_invalid_email(email: str) -> None:
    assert validate_case_record(_record(owner_email=email)) == [
        f"owner_email '{email}' is not a valid email address"
    ]


def test_service_type_is_case_insensitive() -> None:
    assert validate_case_record(_record(service_type="Medical")) == []


def test_unknown_service_type_lists_accepted_values() -> None:
    errors = validate_case_record(_record(service_type="surgery"))
    assert len(errors) == 1
    assert errors[0].startswith("service_type 'surgery' is not supported")
    for value in ("adoption", "rescue", "medical", "lost_found", "other"):
        assert value in errors[0]


def test_status_rule() -> None:
    assert validate_case_record(_record(status="IN_PROGRESS")) == []
    errors = validate_case_record(_record(status="closed"))
    assert errors == [
        "status 'closed' is not supported; expected one of: "
        "open, in_progress, completed, on_hold"
    ]


def test_validation_accepts_plain_mappings() -> None:
    assert validate_case_record({"owner_name": "Jane Doe"}) == [
        "owner_phone is required",
        "pet_name is required",
        "service_type is required",
    ]


def test_validation_is_deterministic_and_ignores_stale_errors() -> None:
    record = _record(owner_phone="12", errors=["something stale"])
    first = validate_case_record(record)
    assert first == validate_case_record(record)
    assert revalidate_record(record).errors == first


def test_noop_correction_keeps_errors() -> None:
    record = revalidate_record(_record(service_type="surgery"))
    corrected = apply_corrections(record, {})
    assert corrected.errors == record.errors
    assert corrected.field_values() == record.field_values()


def test_correction_clears_errors_and_keeps_provenance() -> None:
    record = revalidate_record(
        _record(owner_phone="12345").model_copy(
            update={
                "index": 7,
                "original_data": {"phone": "12345"},
                "record_source": SourceSystem.MANUAL,
            }
        )
    )
    assert record.errors

    corrected = apply_corrections(
        record,
        {"owner_phone": "555-123-4567", "_index": 99, "unknown": "x"},
    )

    assert corrected.errors == []
    assert corrected.owner_phone == "555-123-4567"
    assert corrected.index == 7
    assert corrected.original_data == {"phone": "12345"}
    assert corrected.record_source is SourceSystem.MANUAL
    assert record.owner_phone == "12345"


def test_ensure_valid_raises_with_every_message() -> None:
    record = _record(owner_phone="", pet_name="").model_copy(update={"index": 2})

    with pytest.raises(RecordValidationError) as excinfo:
        ensure_valid(record)

    assert excinfo.value.errors == ["owner_phone is required", "pet_name is required"]
    assert excinfo.value.index == 2
    assert str(excinfo.value) == "owner_phone is required; pet_name is required"
    assert ensure_valid(_record()).owner_name == "Jane Doe"
