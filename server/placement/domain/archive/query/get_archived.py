from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.service.archive import ArchiveManager
from placement.domain.shared.query import Query, QueryHandler, Result


class GetArchived(Query):
    kind: EntityKind = EntityKind.COMPANIES
    id: str


class ArchivedDetail(Result):
    entry: ArchiveEntry


class GetArchivedHandler(QueryHandler[GetArchived, ArchivedDetail]):
    archive_manager: ArchiveManager

    async def run(self, query: GetArchived) -> ArchivedDetail:
        return ArchivedDetail(entry=await self.archive_manager.get_entry(query.id, query.kind))
