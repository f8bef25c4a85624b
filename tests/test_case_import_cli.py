"""Tests for the case import command line script."""

from __future__ import annotations

import importlib.util
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

import pytest

from phcs.core.config import get_settings

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "case_import.py"

MANUAL_CSV = (
    "owner_name,owner_phone,pet_name,service_type\n"
    "Jane Doe,555-123-4567,Rex,medical\n"
    "John Roe,555-987-6543,Milo,surgery\n"
)


@pytest.fixture()
def case_import() -> ModuleType:
    spec = importlib.util.spec_from_file_location("case_import", SCRIPT_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def local_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("APP_ENV", "local")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_missing_files_exit_with_no_input(
    case_import: ModuleType, tmp_path: Path
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        case_import.main(
            [str(tmp_path / "missing.csv"), "--log-file", str(tmp_path / "import.log")]
        )
    assert excinfo.value.code == case_import.EXIT_NO_INPUT


def test_unparseable_files_exit_with_no_input(
    case_import: ModuleType, tmp_path: Path
) -> None:
    sheet = tmp_path / "cases.xlsx"
    sheet.write_bytes(b"PK\x03\x04")

    assert case_import.run([sheet]) == case_import.EXIT_NO_INPUT


def test_dry_run_writes_log_and_succeeds(
    case_import: ModuleType, tmp_path: Path
) -> None:
    source = tmp_path / "manual.csv"
    source.write_text(MANUAL_CSV, encoding="utf-8")
    log_file = tmp_path / "logs" / "import.log"

    case_import.main([str(source), "--dry-run", "--log-file", str(log_file)])

    log_text = log_file.read_text(encoding="utf-8")
    assert "manual.csv" in log_text
    assert "Dry run complete: 2 records" in log_text


def test_run_commits_valid_rows(
    case_import: ModuleType, tmp_path: Path, local_env: None
) -> None:
    source = tmp_path / "manual.csv"
    source.write_text(MANUAL_CSV, encoding="utf-8")
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"

    code = case_import.run([source], dry_run=False, database_url=database_url)

    assert code == case_import.EXIT_ROW_FAILURES
    assert (tmp_path / "cli.db").exists()


def test_repeated_runs_do_not_duplicate_log_lines(
    case_import: ModuleType, tmp_path: Path
) -> None:
    source = tmp_path / "manual.csv"
    source.write_text(MANUAL_CSV, encoding="utf-8")
    log_file = tmp_path / "import.log"

    case_import.main([str(source), "--dry-run", "--log-file", str(log_file)])
    case_import.main([str(source), "--dry-run", "--log-file", str(log_file)])

    log_text = log_file.read_text(encoding="utf-8")
    assert log_text.count("Dry run complete: 2 records") == 2
    assert log_text.count("Import finished (mode=dry-run)") == 2
    assert (
        "phcs.services.import_preview_service: "
        "Previewed manual.csv: source=manual records=2 invalid=1" in log_text
    )


def test_run_logs_service_output_with_masked_phones(
    case_import: ModuleType, tmp_path: Path, local_env: None
) -> None:
    source = tmp_path / "manual.csv"
    source.write_text(MANUAL_CSV, encoding="utf-8")
    log_file = tmp_path / "import.log"
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"

    with pytest.raises(SystemExit) as excinfo:
        case_import.main(
            [
                str(source),
                "--run",
                "--database-url",
                database_url,
                "--log-file",
                str(log_file),
            ]
        )

    assert excinfo.value.code == case_import.EXIT_ROW_FAILURES
    log_text = log_file.read_text(encoding="utf-8")
    assert "Case import committed: total=2 imported=1 skipped=1 failed=0" in log_text
    assert "***-***-4567" in log_text
    assert "555-123-4567" not in log_text
