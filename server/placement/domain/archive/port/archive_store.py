from abc import abstractmethod
from typing import Protocol

from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import EntityKind
from placement.domain.shared.port import Port


class ArchiveStore(Port, Protocol):
    """Holds archived records, one collection per kind."""

    @abstractmethod
    async def get(self, kind: EntityKind, record_id: str) -> ArchiveEntry | None: ...

    @abstractmethod
    async def put(self, entry: ArchiveEntry) -> None:
        """Insert or overwrite the entry for (entry.kind, entry.id)."""
        ...

    @abstractmethod
    async def delete(self, kind: EntityKind, record_id: str) -> bool: ...

    @abstractmethod
    async def list(self, kind: EntityKind) -> list[ArchiveEntry]:
        """All entries of a kind, most recently archived first."""
        ...
