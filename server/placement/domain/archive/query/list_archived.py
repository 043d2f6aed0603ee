from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.service.archive import ArchiveManager
from placement.domain.shared.query import Query, QueryHandler, Result


class ListArchived(Query):
    kind: EntityKind = EntityKind.COMPANIES


class ArchivedList(Result):
    kind: EntityKind
    items: list[ArchiveEntry]
    total: int


class ListArchivedHandler(QueryHandler[ListArchived, ArchivedList]):
    archive_manager: ArchiveManager

    async def run(self, query: ListArchived) -> ArchivedList:
        entries = await self.archive_manager.list_entries(query.kind)
        return ArchivedList(kind=query.kind, items=entries, total=len(entries))
