"""Build annotated previews of uploaded case import files.

Previews never touch storage: each file is parsed, its source system detected
once, and every row mapped and validated so staff can review and correct it
before anything is committed.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Any

from phcs.models.case import SourceSystem
from phcs.schemas.case_import import (
    ImportPreviewResponse,
    NormalizedCaseRecord,
    PreviewFileResult,
    PreviewFileStatus,
)
from phcs.services.import_errors import ImportFormatError
from phcs.services.import_sources import detect_source_system, map_record
from phcs.services.import_validation import revalidate_record

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".json")


def _decode(file_name: str, content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportFormatError(file_name, f"{file_name} must be UTF-8 encoded") from exc


def _parse_csv(file_name: str, text: str) -> list[dict[str, Any]]:
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    headers: list[str] | None = None
    records: list[dict[str, Any]] = []
    try:
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            if headers is None:
                headers = [cell.strip() for cell in row]
                continue
            if len(row) > len(headers):
                raise ImportFormatError(
                    file_name,
                    f"Line {reader.line_num} of {file_name} has {len(row)} values "
                    f"but the header defines {len(headers)} columns",
                )
            padded = row + [""] * (len(headers) - len(row))
            records.append(dict(zip(headers, padded)))
    except csv.Error as exc:
        raise ImportFormatError(
            file_name, f"Invalid CSV in {file_name} (line {reader.line_num}): {exc}"
        ) from exc
    return records


def _parse_json(file_name: str, text: str) -> list[dict[str, Any]]:
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise ImportFormatError(file_name, f"Invalid JSON in {file_name}: {exc}") from exc

    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise ImportFormatError(
            file_name, f"{file_name} must contain a JSON object or an array of objects"
        )
    for position, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ImportFormatError(
                file_name, f"Item {position} in {file_name} is not a JSON object"
            )
    return payload


def parse_upload(
    file_name: str, content: bytes, *, max_bytes: int | None = None
) -> list[dict[str, Any]]:
    """Parse an uploaded file into raw records.

    Raises ``ImportFormatError`` for unsupported extensions, oversized files,
    and content that cannot be decoded or parsed.
    """
    extension = PurePath(file_name).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise ImportFormatError(
            file_name,
            f"Unsupported file type '{extension or file_name}'; "
            "only .csv and .json files can be imported",
        )
    if max_bytes is not None and len(content) > max_bytes:
        raise ImportFormatError(
            file_name, f"{file_name} exceeds the {max_bytes} byte upload limit"
        )

    text = _decode(file_name, content)
    if extension == ".csv":
        return _parse_csv(file_name, text)
    return _parse_json(file_name, text)


def build_file_preview(
    file_name: str,
    content: bytes,
    *,
    max_bytes: int | None = None,
    imported_at: datetime | None = None,
) -> PreviewFileResult:
    """Parse, detect, map and validate one uploaded file."""
    try:
        raw_records = parse_upload(file_name, content, max_bytes=max_bytes)
    except ImportFormatError as exc:
        logger.warning("Import preview rejected %s: %s", file_name, exc)
        return PreviewFileResult(
            file_name=file_name,
            status=PreviewFileStatus.ERROR,
            error=str(exc),
        )

    source = (
        detect_source_system(raw_records[0].keys())
        if raw_records
        else SourceSystem.MANUAL
    )
    imported_at = imported_at or datetime.now(UTC)
    records: list[NormalizedCaseRecord] = [
        revalidate_record(
            map_record(raw, source, index=index, imported_at=imported_at)
        )
        for index, raw in enumerate(raw_records)
    ]
    invalid = sum(1 for record in records if record.errors)
    logger.info(
        "Previewed %s: source=%s records=%s invalid=%s",
        file_name,
        source.value,
        len(records),
        invalid,
    )
    return PreviewFileResult(
        file_name=file_name,
        source_system=source,
        status=PreviewFileStatus.WARNING if invalid else PreviewFileStatus.OK,
        record_count=len(records),
        records=records,
    )


def build_preview(
    files: Iterable[tuple[str, bytes]],
    *,
    max_bytes: int | None = None,
    imported_at: datetime | None = None,
) -> ImportPreviewResponse:
    """Preview every uploaded file; one bad file never affects the others."""
    files = list(files)
    if not files:
        raise ValueError("No files uploaded")

    imported_at = imported_at or datetime.now(UTC)
    results = [
        build_file_preview(
            file_name, content, max_bytes=max_bytes, imported_at=imported_at
        )
        for file_name, content in files
    ]
    return ImportPreviewResponse(
        preview_data=results,
        total_records=sum(result.record_count for result in results),
    )


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "build_file_preview",
    "build_preview",
    "parse_upload",
]
