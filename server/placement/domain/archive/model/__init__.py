from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import (
    ArchiveBatchResult,
    ArchiveFailure,
    EntityKind,
)

__all__ = ["ArchiveBatchResult", "ArchiveEntry", "ArchiveFailure", "EntityKind"]
