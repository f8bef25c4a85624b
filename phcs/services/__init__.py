"""Service layer exports."""
from phcs.services import (
    case_service,
    import_commit_service,
    import_preview_service,
    owner_service,
    pet_service,
)

__all__ = [
    "case_service",
    "import_commit_service",
    "import_preview_service",
    "owner_service",
    "pet_service",
]
