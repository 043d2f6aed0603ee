from placement.domain.archive.model.value import EntityKind
from placement.domain.shared.event import Event


class RecordRestored(Event):
    """Audit trail: an archived record returned to the primary store."""

    kind: EntityKind
    record_id: str
