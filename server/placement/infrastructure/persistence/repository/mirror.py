from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import delete, insert, select, update

from placement.domain.company.model.value import CompanyId, MirrorProjection
from placement.domain.company.port.mirror import MirrorStore
from placement.infrastructure.persistence.session import SerializedSession
from placement.infrastructure.persistence.tables import mirror_projections_table


class SQLMirrorStore(MirrorStore):
    """Mirror projections kept in the primary database.

    Used for local deployments and tests where no external mirror exists.
    """

    def __init__(self, session: SerializedSession) -> None:
        self.session = session

    async def get(self, company_id: CompanyId) -> MirrorProjection | None:
        stmt = select(mirror_projections_table.c.payload).where(
            mirror_projections_table.c.company_id == company_id
        )
        result = await self.session.execute(stmt)
        row = result.first()
        return MirrorProjection.model_validate(row.payload) if row else None

    async def get_many(self, company_ids: Iterable[CompanyId]) -> dict[CompanyId, MirrorProjection]:
        ids = list(company_ids)
        if not ids:
            return {}
        stmt = select(
            mirror_projections_table.c.company_id, mirror_projections_table.c.payload
        ).where(mirror_projections_table.c.company_id.in_(ids))
        result = await self.session.execute(stmt)
        return {
            CompanyId(row.company_id): MirrorProjection.model_validate(row.payload)
            for row in result.all()
        }

    async def put(self, company_id: CompanyId, projection: MirrorProjection) -> None:
        payload = projection.model_dump(mode="json")
        now = datetime.now(UTC)
        result = await self.session.execute(
            update(mirror_projections_table)
            .where(mirror_projections_table.c.company_id == company_id)
            .values(payload=payload, synced_at=now)
        )
        if result.rowcount == 0:
            await self.session.execute(
                insert(mirror_projections_table).values(
                    company_id=company_id, payload=payload, synced_at=now
                )
            )

    async def delete(self, company_id: CompanyId) -> None:
        await self.session.execute(
            delete(mirror_projections_table).where(
                mirror_projections_table.c.company_id == company_id
            )
        )

    async def list_ids(self) -> set[CompanyId]:
        result = await self.session.execute(select(mirror_projections_table.c.company_id))
        return {CompanyId(row.company_id) for row in result.all()}
