"""Error taxonomy for the bulk case import pipeline."""

from __future__ import annotations


class ImportPipelineError(RuntimeError):
    """Base error for import failures scoped to one file or one record."""


class ImportFormatError(ImportPipelineError):
    """Uploaded file has an unsupported extension or unparseable content."""

    def __init__(self, file_name: str, message: str) -> None:
        super().__init__(message)
        self.file_name = file_name


class RecordValidationError(ImportPipelineError):
    """One record violates one or more field rules."""

    def __init__(self, errors: list[str], *, index: int | None = None) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)
        self.index = index


class ImportPersistenceError(ImportPipelineError):
    """A storage operation failed while committing one record."""


__all__ = [
    "ImportFormatError",
    "ImportPersistenceError",
    "ImportPipelineError",
    "RecordValidationError",
]
