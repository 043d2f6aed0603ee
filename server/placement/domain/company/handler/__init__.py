"""Company domain event handlers."""

from placement.domain.company.handler.reconcile_company import ReconcileCompany
from placement.domain.company.handler.reconcile_on_startup import ReconcileOnStartup
from placement.domain.company.handler.sync_mirror_projection import SyncMirrorProjection

__all__ = ["ReconcileCompany", "ReconcileOnStartup", "SyncMirrorProjection"]
