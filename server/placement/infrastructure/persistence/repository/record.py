from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, insert, select, update

from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.port.record_store import RecordStore
from placement.infrastructure.persistence.session import SerializedSession
from placement.infrastructure.persistence.tables import records_table


class SQLRecordStore(RecordStore):
    """Whole-document access to the records table, for any entity kind."""

    def __init__(self, session: SerializedSession) -> None:
        self.session = session

    def _where(self, kind: EntityKind, record_id: str) -> Any:
        return (records_table.c.kind == kind.value) & (records_table.c.id == record_id)

    async def get(self, kind: EntityKind, record_id: str) -> dict[str, Any] | None:
        stmt = select(records_table.c.payload).where(self._where(kind, record_id))
        result = await self.session.execute(stmt)
        row = result.first()
        return dict(row.payload) if row else None

    async def put(self, kind: EntityKind, record_id: str, document: dict[str, Any]) -> None:
        now = datetime.now(UTC)
        version = document.get("version", 1)
        result = await self.session.execute(
            update(records_table)
            .where(self._where(kind, record_id))
            .values(payload=document, version=version, updated_at=now)
        )
        if result.rowcount == 0:
            await self.session.execute(
                insert(records_table).values(
                    kind=kind.value,
                    id=record_id,
                    payload=document,
                    version=version,
                    created_at=now,
                    updated_at=now,
                )
            )

    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        result = await self.session.execute(
            delete(records_table).where(self._where(kind, record_id))
        )
        return result.rowcount > 0

    async def list(self, kind: EntityKind) -> list[dict[str, Any]]:
        stmt = (
            select(records_table.c.payload)
            .where(records_table.c.kind == kind.value)
            .order_by(records_table.c.id)
        )
        result = await self.session.execute(stmt)
        return [dict(row.payload) for row in result.all()]
