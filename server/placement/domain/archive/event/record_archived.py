from placement.domain.archive.model.value import EntityKind
from placement.domain.shared.event import Event


class RecordArchived(Event):
    """Audit trail: a record moved from the primary store to the archive."""

    kind: EntityKind
    record_id: str
    deleted_by_role: str
