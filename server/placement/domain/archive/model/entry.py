from datetime import datetime
from typing import Any

from placement.domain.archive.model.value import EntityKind
from placement.domain.shared.model.entity import Entity

# Lifecycle keys never carried back into the primary store. The camelCase
# spellings appear in snapshots written by the legacy dashboard.
LIFECYCLE_KEYS = frozenset({"deleted_at", "deleted_by_role", "deletedAt", "deletedByRole"})


class ArchiveEntry(Entity):
    """A whole record removed from the primary store, with who removed it and when."""

    kind: EntityKind
    id: str
    snapshot: dict[str, Any]
    deleted_at: datetime
    deleted_by_role: str

    def to_record(self) -> dict[str, Any]:
        """The record as it should be written back to the primary store."""
        return {k: v for k, v in self.snapshot.items() if k not in LIFECYCLE_KEYS}
