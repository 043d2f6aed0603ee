from abc import abstractmethod
from typing import Any, Protocol

from placement.domain.archive.model.value import EntityKind
from placement.domain.shared.port import Port


class RecordStore(Port, Protocol):
    """Primary store viewed as whole documents keyed by (kind, id)."""

    @abstractmethod
    async def get(self, kind: EntityKind, record_id: str) -> dict[str, Any] | None: ...

    @abstractmethod
    async def put(self, kind: EntityKind, record_id: str, document: dict[str, Any]) -> None:
        """Insert or overwrite the whole document."""
        ...

    @abstractmethod
    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        """Delete a document. Returns False when it was not present."""
        ...

    @abstractmethod
    async def list(self, kind: EntityKind) -> list[dict[str, Any]]: ...
