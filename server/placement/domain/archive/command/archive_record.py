import logfire

from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.service.archive import ArchiveManager
from placement.domain.shared.command import Command, CommandHandler, Result


class ArchiveRecord(Command):
    kind: EntityKind = EntityKind.COMPANIES
    id: str
    actor_role: str
    expected_version: int | None = None


class RecordArchivedResult(Result):
    kind: EntityKind
    id: str
    deleted_by_role: str


class ArchiveRecordHandler(CommandHandler[ArchiveRecord, RecordArchivedResult]):
    archive_manager: ArchiveManager

    async def run(self, cmd: ArchiveRecord) -> RecordArchivedResult:
        with logfire.span("ArchiveRecord"):
            entry = await self.archive_manager.archive(
                cmd.id, cmd.actor_role, kind=cmd.kind, expected_version=cmd.expected_version
            )
            return RecordArchivedResult(
                kind=entry.kind, id=entry.id, deleted_by_role=entry.deleted_by_role
            )
