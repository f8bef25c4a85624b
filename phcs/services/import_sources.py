"""Source detection and column mapping for case import files.

Every intake system exports its own column names. ``detect_source_system``
picks the system from a file's header, and ``map_record`` projects one raw row
onto the unified case fields using that system's fallback chains.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from phcs.models.case import ServiceType, SourceSystem
from phcs.models.pet import DEFAULT_SPECIES
from phcs.schemas.case_import import NormalizedCaseRecord

RawRecord = Mapping[str, Any]

DEFAULT_STATUS = "open"
DEFAULT_SERVICE_TYPE = ServiceType.OTHER.value
DEFAULT_PET_NAME = "Unknown"

_VOICEMAIL_COLUMNS = frozenset({"caller_name", "caller_phone", "message_transcript"})
_WAITWHILE_COLUMNS = frozenset({"full_name", "reason_for_visit", "check_in_time"})


@dataclass(frozen=True)
class FieldChain:
    """Source columns tried in order for one target field."""

    columns: tuple[str, ...]
    default: str = ""


MANUAL_CHAINS: dict[str, FieldChain] = {
    "owner_name": FieldChain(("owner_name", "name", "owner")),
    "owner_phone": FieldChain(("owner_phone", "phone", "phone_number")),
    "owner_email": FieldChain(("owner_email", "email")),
    "pet_name": FieldChain(("pet_name", "pet")),
    "pet_species": FieldChain(("pet_species", "species", "pet_type"), DEFAULT_SPECIES),
    "pet_details": FieldChain(("pet_details", "pet_description")),
    "breed": FieldChain(("breed", "pet_breed")),
    "initial_request": FieldChain(("initial_request", "request", "description")),
    "service_type": FieldChain(("service_type", "service")),
    "status": FieldChain(("status",), DEFAULT_STATUS),
    "notes": FieldChain(("notes",)),
}

VOICEMAIL_CHAINS: dict[str, FieldChain] = {
    "owner_name": FieldChain(("caller_name", "name")),
    "owner_phone": FieldChain(("caller_phone", "callback_number", "phone")),
    "owner_email": FieldChain(("caller_email", "email")),
    "pet_name": FieldChain(("pet_name",), DEFAULT_PET_NAME),
    "pet_species": FieldChain(("pet_type", "pet_species", "species"), DEFAULT_SPECIES),
    "pet_details": FieldChain(("pet_details",)),
    "breed": FieldChain(("breed",)),
    "initial_request": FieldChain(("message_transcript", "transcript")),
    "service_type": FieldChain(("service_type", "service"), DEFAULT_SERVICE_TYPE),
    "status": FieldChain(("status",), DEFAULT_STATUS),
}

WAITWHILE_CHAINS: dict[str, FieldChain] = {
    "owner_name": FieldChain(("full_name", "customer_name", "name")),
    "owner_phone": FieldChain(("phone", "phone_number", "mobile")),
    "owner_email": FieldChain(("email", "email_address")),
    "pet_name": FieldChain(("pet_name", "pet")),
    "pet_species": FieldChain(("pet_type", "pet_species", "species"), DEFAULT_SPECIES),
    "pet_details": FieldChain(("pet_details", "pet_notes")),
    "breed": FieldChain(("breed", "pet_breed")),
    "initial_request": FieldChain(("reason_for_visit", "reason")),
    "service_type": FieldChain(("service_type", "service"), DEFAULT_SERVICE_TYPE),
    "status": FieldChain(("status",), DEFAULT_STATUS),
}

SOURCE_CHAINS: dict[SourceSystem, dict[str, FieldChain]] = {
    SourceSystem.MANUAL: MANUAL_CHAINS,
    SourceSystem.VOICEMAIL: VOICEMAIL_CHAINS,
    SourceSystem.WAITWHILE: WAITWHILE_CHAINS,
}

_VOICEMAIL_TIME_COLUMNS = ("call_time", "received_at", "timestamp")
_WAITWHILE_TIME_COLUMNS = ("check_in_time",)


def detect_source_system(columns: Iterable[Any]) -> SourceSystem:
    """Return the intake system whose column conventions match ``columns``."""
    names = {str(column).strip().lower() for column in columns if column is not None}
    if names & _VOICEMAIL_COLUMNS:
        return SourceSystem.VOICEMAIL
    if names & _WAITWHILE_COLUMNS:
        return SourceSystem.WAITWHILE
    return SourceSystem.MANUAL


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _lowered(raw: RawRecord) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for key, value in raw.items():
        if key is None:
            continue
        lookup.setdefault(str(key).strip().lower(), _to_text(value))
    return lookup


def _first_present(lookup: Mapping[str, str], columns: Iterable[str]) -> str:
    for column in columns:
        value = lookup.get(column, "")
        if value:
            return value
    return ""


def _resolve(lookup: Mapping[str, str], chain: FieldChain) -> str:
    return _first_present(lookup, chain.columns) or chain.default


def _provenance_note(prefix: str, timestamp: str, source_notes: str) -> str:
    note = f"{prefix} {timestamp}"
    if source_notes:
        note = f"{note}\n{source_notes}"
    return note


def map_record(
    raw: RawRecord,
    source: SourceSystem,
    *,
    index: int | None = None,
    imported_at: datetime | None = None,
) -> NormalizedCaseRecord:
    """Project one raw row onto the unified case schema.

    Missing columns fall back to defaults; this never raises for any mapping.
    ``imported_at`` stamps synthesized notes when the row carries no timestamp
    of its own.
    """
    source = SourceSystem(source)
    lookup = _lowered(raw)
    fields = {
        name: _resolve(lookup, chain) for name, chain in SOURCE_CHAINS[source].items()
    }

    if source is not SourceSystem.MANUAL:
        stamp = (imported_at or datetime.now(UTC)).isoformat(timespec="seconds")
        if source is SourceSystem.VOICEMAIL:
            timestamp = _first_present(lookup, _VOICEMAIL_TIME_COLUMNS) or stamp
            fields["notes"] = _provenance_note(
                "Imported from voicemail received", timestamp, lookup.get("notes", "")
            )
        else:
            timestamp = _first_present(lookup, _WAITWHILE_TIME_COLUMNS) or stamp
            fields["notes"] = _provenance_note(
                "Walk-in check-in at", timestamp, lookup.get("notes", "")
            )

    return NormalizedCaseRecord(
        **fields,
        source_system=source.value,
        original_data={
            str(key): value for key, value in raw.items() if key is not None
        },
        index=index,
        record_source=source,
    )


__all__ = [
    "DEFAULT_PET_NAME",
    "DEFAULT_SERVICE_TYPE",
    "DEFAULT_STATUS",
    "FieldChain",
    "RawRecord",
    "SOURCE_CHAINS",
    "detect_source_system",
    "map_record",
]
