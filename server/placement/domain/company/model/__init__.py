from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import (
    Attribution,
    CompanyId,
    MirrorProjection,
    MoaStatus,
    WorkMode,
)

__all__ = [
    "Attribution",
    "Company",
    "CompanyId",
    "MirrorProjection",
    "MoaStatus",
    "WorkMode",
]
