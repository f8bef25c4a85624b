"""Import case files (CSV or JSON) from disk into the case database."""

# ruff: noqa: E402  # allow path/bootstrap tweaks before app imports

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from phcs.core.config import get_settings
from phcs.db.session import create_all, dispose_engine, get_sessionmaker
from phcs.schemas.case_import import ImportPreviewResponse, PreviewFileStatus
from phcs.security.logging_filters import install_sensitive_filter
from phcs.services.import_commit_service import (
    ImportCommitResult,
    SqlAlchemyCaseImportStore,
    commit_records,
)
from phcs.services.import_preview_service import build_preview

LOGGER = logging.getLogger("case_import")

EXIT_OK = 0
EXIT_NO_INPUT = 1
EXIT_ROW_FAILURES = 2


def configure_logging(log_path: Path) -> list[logging.Handler]:
    """Send every logger's output, ``phcs.*`` included, to the file and console.

    Handlers installed by an earlier call are closed and replaced.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_case_import", False):
            root.removeHandler(handler)
            handler.close()

    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    handlers: list[logging.Handler] = [
        logging.FileHandler(log_path, mode="a", encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._case_import = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(logging.INFO)
    install_sensitive_filter("")
    return handlers


def release_logging(handlers: Sequence[logging.Handler]) -> None:
    root = logging.getLogger()
    for handler in handlers:
        root.removeHandler(handler)
        handler.close()


def read_files(paths: Sequence[Path]) -> list[tuple[str, bytes]]:
    """Read every readable path; unreadable ones are logged and left out."""
    files: list[tuple[str, bytes]] = []
    for path in paths:
        try:
            files.append((path.name, path.read_bytes()))
        except OSError as exc:
            LOGGER.error("Cannot read %s: %s", path, exc)
    return files


def log_preview(preview: ImportPreviewResponse) -> None:
    LOGGER.info("Preview summary:")
    for result in preview.preview_data:
        if result.status is PreviewFileStatus.ERROR:
            LOGGER.error("  %-30s error: %s", result.file_name, result.error)
            continue
        invalid = sum(1 for record in result.records if record.has_errors)
        LOGGER.info(
            "  %-30s source=%-9s records=%-5s invalid=%-5s",
            result.file_name,
            result.source_system.value if result.source_system else "-",
            result.record_count,
            invalid,
        )


async def commit_preview(
    preview: ImportPreviewResponse, *, database_url: str | None = None
) -> ImportCommitResult | None:
    """Commit every record of every parsed file through the SQLAlchemy store."""
    records = [
        record
        for result in preview.preview_data
        if result.status is not PreviewFileStatus.ERROR
        for record in result.records
    ]
    if not records:
        LOGGER.warning("Nothing to import")
        return None

    settings = get_settings()
    if settings.app_env == "local":
        await create_all(database_url)
    session_factory = get_sessionmaker(database_url)
    try:
        async with session_factory() as session:
            return await commit_records(SqlAlchemyCaseImportStore(session), records)
    finally:
        await dispose_engine(database_url)


def run(
    paths: Sequence[Path], *, dry_run: bool = True, database_url: str | None = None
) -> int:
    """Preview ``paths`` and optionally commit them; returns the exit code."""
    files = read_files(paths)
    if not files:
        LOGGER.error("No readable input files")
        return EXIT_NO_INPUT

    settings = get_settings()
    preview = build_preview(files, max_bytes=settings.import_max_file_bytes)
    log_preview(preview)
    if all(result.status is PreviewFileStatus.ERROR for result in preview.preview_data):
        LOGGER.error("None of the input files could be parsed")
        return EXIT_NO_INPUT

    if dry_run:
        LOGGER.info(
            "Dry run complete: %s records across %s files",
            preview.total_records,
            len(preview.preview_data),
        )
        return EXIT_OK

    result = asyncio.run(commit_preview(preview, database_url=database_url))
    if result is None:
        return EXIT_OK

    LOGGER.info(
        "Import summary: total=%s imported=%s skipped=%s failed=%s",
        result.total_records,
        result.imported_count,
        result.skipped_count,
        result.failed_count,
    )
    for error in result.errors[:10]:
        LOGGER.info("  %s", error)
    if len(result.errors) > 10:
        LOGGER.info("  ... %s more", len(result.errors) - 10)

    if result.skipped_count or result.failed_count:
        return EXIT_ROW_FAILURES
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Import case files")
    parser.add_argument("files", nargs="+", type=Path, help="CSV or JSON files")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run", action="store_true", help="Preview files without writing data"
    )
    mode.add_argument("--run", action="store_true", help="Perform the import")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL for this run",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=Path("imports/case_import.log"),
        help="Where to append the import log",
    )
    args = parser.parse_args(argv)

    dry_run = args.dry_run or not args.run
    handlers = configure_logging(args.log_file)
    try:
        code = run(args.files, dry_run=dry_run, database_url=args.database_url)
        LOGGER.info("Import finished (mode=%s)", "dry-run" if dry_run else "run")
    finally:
        release_logging(handlers)
    if code != EXIT_OK:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
