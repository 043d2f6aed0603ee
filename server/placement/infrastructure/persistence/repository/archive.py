from typing import Any

from sqlalchemy import delete, insert, select, update

from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.port.archive_store import ArchiveStore
from placement.infrastructure.persistence.mappers.archive import entry_to_row, row_to_entry
from placement.infrastructure.persistence.session import SerializedSession
from placement.infrastructure.persistence.tables import archived_records_table


class SQLArchiveStore(ArchiveStore):
    def __init__(self, session: SerializedSession) -> None:
        self.session = session

    def _where(self, kind: EntityKind, record_id: str) -> Any:
        return (archived_records_table.c.kind == kind.value) & (
            archived_records_table.c.id == record_id
        )

    async def get(self, kind: EntityKind, record_id: str) -> ArchiveEntry | None:
        stmt = select(archived_records_table).where(self._where(kind, record_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_entry(dict(row)) if row else None

    async def put(self, entry: ArchiveEntry) -> None:
        row = entry_to_row(entry)
        result = await self.session.execute(
            update(archived_records_table)
            .where(self._where(entry.kind, entry.id))
            .values(
                snapshot=row["snapshot"],
                deleted_at=row["deleted_at"],
                deleted_by_role=row["deleted_by_role"],
            )
        )
        if result.rowcount == 0:
            await self.session.execute(insert(archived_records_table).values(**row))

    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        result = await self.session.execute(
            delete(archived_records_table).where(self._where(kind, record_id))
        )
        return result.rowcount > 0

    async def list(self, kind: EntityKind) -> list[ArchiveEntry]:
        stmt = (
            select(archived_records_table)
            .where(archived_records_table.c.kind == kind.value)
            .order_by(archived_records_table.c.deleted_at.desc())
        )
        result = await self.session.execute(stmt)
        return [row_to_entry(dict(r)) for r in result.mappings().all()]
