"""Company domain events."""

from placement.domain.company.event.company_changed import CompanyChanged
from placement.domain.company.event.mirror_sync_requested import MirrorSyncRequested

__all__ = ["CompanyChanged", "MirrorSyncRequested"]
