from placement.domain.company.schedule.full_reconciliation import FullReconciliation

__all__ = ["FullReconciliation"]
