import logfire
from pydantic import Field

from placement.domain.archive.model.value import ArchiveBatchResult, EntityKind
from placement.domain.archive.service.archive import ArchiveManager
from placement.domain.shared.command import Command, CommandHandler, Result


class ArchiveRecords(Command):
    kind: EntityKind = EntityKind.COMPANIES
    ids: list[str] = Field(min_length=1)
    actor_role: str


class RecordsArchived(Result):
    result: ArchiveBatchResult


class ArchiveRecordsHandler(CommandHandler[ArchiveRecords, RecordsArchived]):
    archive_manager: ArchiveManager

    async def run(self, cmd: ArchiveRecords) -> RecordsArchived:
        with logfire.span("ArchiveRecords"):
            result = await self.archive_manager.archive_many(cmd.ids, cmd.actor_role, kind=cmd.kind)
            logfire.info(
                "Bulk archive finished",
                kind=cmd.kind.value,
                succeeded=result.succeeded,
                failed=len(result.failures),
            )
            return RecordsArchived(result=result)
