"""ORM models package export."""

from phcs.models.case import Case, CaseNote, CaseStatus, ServiceType, SourceSystem
from phcs.models.owner import Owner
from phcs.models.pet import DEFAULT_SPECIES, Pet

__all__ = [
    "Case",
    "CaseNote",
    "CaseStatus",
    "DEFAULT_SPECIES",
    "Owner",
    "Pet",
    "ServiceType",
    "SourceSystem",
]
