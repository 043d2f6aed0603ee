from abc import abstractmethod
from typing import Any, Protocol

from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import CompanyId
from placement.domain.shared.port import Port


class CompanyRepository(Port, Protocol):
    """Primary store for active companies."""

    @abstractmethod
    async def get(self, company_id: CompanyId) -> Company | None: ...

    @abstractmethod
    async def list(self) -> list[Company]: ...

    @abstractmethod
    async def add(self, company: Company) -> None:
        """Insert a new company. Raises ConflictError if the id is taken."""
        ...

    @abstractmethod
    async def save(self, company: Company, expected_version: int | None = None) -> None:
        """Overwrite the stored company.

        With ``expected_version`` the write only succeeds if the stored
        version still matches; otherwise ConflictError is raised.
        """
        ...

    @abstractmethod
    async def apply_derived(self, company_id: CompanyId, fields: dict[str, Any]) -> None:
        """Write synchronizer-owned fields only. Leaves version and updated_at alone."""
        ...
