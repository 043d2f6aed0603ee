from abc import abstractmethod
from collections.abc import Iterable
from typing import Protocol

from placement.domain.company.model.value import CompanyId, MirrorProjection
from placement.domain.shared.port import Port


class MirrorStore(Port, Protocol):
    """Secondary store read by the mobile client.

    Holds one projection per active company, keyed by company id. Writes
    here are never part of a primary-store transaction.
    """

    @abstractmethod
    async def get(self, company_id: CompanyId) -> MirrorProjection | None: ...

    @abstractmethod
    async def get_many(self, company_ids: Iterable[CompanyId]) -> dict[CompanyId, MirrorProjection]:
        """Fetch projections for many ids at once. Missing ids are omitted."""
        ...

    @abstractmethod
    async def put(self, company_id: CompanyId, projection: MirrorProjection) -> None: ...

    @abstractmethod
    async def delete(self, company_id: CompanyId) -> None:
        """Remove a projection. Deleting an absent id is not an error."""
        ...

    @abstractmethod
    async def list_ids(self) -> set[CompanyId]: ...
