from typing import Any

import logfire

from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.service.restore import RestoreCoordinator
from placement.domain.shared.command import Command, CommandHandler, Result


class RestoreRecord(Command):
    kind: EntityKind = EntityKind.COMPANIES
    id: str


class RecordRestoredResult(Result):
    kind: EntityKind
    id: str
    record: dict[str, Any]


class RestoreRecordHandler(CommandHandler[RestoreRecord, RecordRestoredResult]):
    restore_coordinator: RestoreCoordinator

    async def run(self, cmd: RestoreRecord) -> RecordRestoredResult:
        with logfire.span("RestoreRecord"):
            record = await self.restore_coordinator.restore(cmd.id, kind=cmd.kind)
            return RecordRestoredResult(kind=cmd.kind, id=cmd.id, record=record)
