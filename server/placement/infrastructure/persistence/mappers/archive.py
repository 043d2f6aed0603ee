"""Archive entry mapper."""

from typing import Any

from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import EntityKind


def entry_to_row(entry: ArchiveEntry) -> dict[str, Any]:
    return {
        "kind": entry.kind.value,
        "id": entry.id,
        "snapshot": entry.snapshot,
        "deleted_at": entry.deleted_at,
        "deleted_by_role": entry.deleted_by_role,
    }


def row_to_entry(row: dict[str, Any]) -> ArchiveEntry:
    return ArchiveEntry(
        kind=EntityKind(row["kind"]),
        id=row["id"],
        snapshot=dict(row["snapshot"]),
        deleted_at=row["deleted_at"],
        deleted_by_role=row["deleted_by_role"],
    )
