from typing import Any

from pydantic_core import to_jsonable_python
from sqlalchemy import insert, select, update

from placement.domain.archive.model.value import EntityKind
from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import CompanyId
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.shared.error import ConflictError, NotFoundError
from placement.infrastructure.persistence.mappers.company import company_to_row, row_to_company
from placement.infrastructure.persistence.session import SerializedSession
from placement.infrastructure.persistence.tables import records_table

_KIND = EntityKind.COMPANIES.value


class SQLCompanyRepository(CompanyRepository):
    """Companies stored as JSON documents in the records table."""

    def __init__(self, session: SerializedSession) -> None:
        self.session = session

    def _where(self, company_id: str) -> Any:
        return (records_table.c.kind == _KIND) & (records_table.c.id == str(company_id))

    async def get(self, company_id: CompanyId) -> Company | None:
        stmt = select(records_table).where(self._where(company_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_company(dict(row)) if row else None

    async def list(self) -> list[Company]:
        stmt = select(records_table).where(records_table.c.kind == _KIND).order_by(records_table.c.id)
        result = await self.session.execute(stmt)
        return [row_to_company(dict(r)) for r in result.mappings().all()]

    async def add(self, company: Company) -> None:
        if await self.get(company.id) is not None:
            raise ConflictError(f"Company already exists: {company.id}")
        await self.session.execute(insert(records_table).values(**company_to_row(company)))

    async def save(self, company: Company, expected_version: int | None = None) -> None:
        row = company_to_row(company)
        stmt = (
            update(records_table)
            .where(self._where(company.id))
            .values(payload=row["payload"], version=row["version"], updated_at=row["updated_at"])
        )
        if expected_version is not None:
            stmt = stmt.where(records_table.c.version == expected_version)

        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            if expected_version is not None and await self.get(company.id) is not None:
                raise ConflictError(
                    f"Company {company.id} was modified concurrently "
                    f"(expected version {expected_version})"
                )
            raise NotFoundError(f"Company not found: {company.id}")

    async def apply_derived(self, company_id: CompanyId, fields: dict[str, Any]) -> None:
        async with self.session.isolated() as session:
            result = await session.execute(
                select(records_table.c.payload).where(self._where(company_id))
            )
            row = result.first()
            if row is None:
                raise NotFoundError(f"Company not found: {company_id}")

            payload = {**row.payload, **to_jsonable_python(fields)}
            await session.execute(
                update(records_table).where(self._where(company_id)).values(payload=payload)
            )
