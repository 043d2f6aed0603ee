import logfire

from placement.domain.company.service.lifecycle import LifecycleSynchronizer, ReconcileFailure
from placement.domain.shared.command import Command, CommandHandler, Result


class RunReconciliation(Command):
    pass


class ReconciliationReport(Result):
    checked: int
    updated: int
    mirror_requested: int
    orphans: int
    failures: list[ReconcileFailure]


class RunReconciliationHandler(CommandHandler[RunReconciliation, ReconciliationReport]):
    synchronizer: LifecycleSynchronizer

    async def run(self, cmd: RunReconciliation) -> ReconciliationReport:
        with logfire.span("RunReconciliation"):
            report = await self.synchronizer.full_pass()
            return ReconciliationReport(**report.model_dump())
