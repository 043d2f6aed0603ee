"""Archive domain events. No handlers subscribe; they form the audit trail."""

from placement.domain.archive.event.record_archived import RecordArchived
from placement.domain.archive.event.record_restored import RecordRestored

__all__ = ["RecordArchived", "RecordRestored"]
