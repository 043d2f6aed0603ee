from dishka import provide

from placement.domain.archive.command import (
    ArchiveRecordHandler,
    ArchiveRecordsHandler,
    RestoreRecordHandler,
)
from placement.domain.archive.port.archive_store import ArchiveStore
from placement.domain.archive.port.record_store import RecordStore
from placement.domain.archive.query import GetArchivedHandler, ListArchivedHandler
from placement.domain.archive.service.archive import ArchiveManager
from placement.domain.archive.service.restore import RestoreCoordinator
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.company.service.lifecycle import LifecycleSynchronizer
from placement.domain.shared.outbox import Outbox
from placement.domain.shared.port.clock import Clock
from placement.domain.shared.port.unit_of_work import UnitOfWork
from placement.util.di.base import Provider
from placement.util.di.scope import Scope


class ArchiveProvider(Provider):
    @provide(scope=Scope.UOW)
    def get_archive_manager(
        self,
        record_store: RecordStore,
        archive_store: ArchiveStore,
        outbox: Outbox,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> ArchiveManager:
        return ArchiveManager(
            record_store=record_store,
            archive_store=archive_store,
            outbox=outbox,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.UOW)
    def get_restore_coordinator(
        self,
        record_store: RecordStore,
        archive_store: ArchiveStore,
        companies: CompanyRepository,
        synchronizer: LifecycleSynchronizer,
        outbox: Outbox,
    ) -> RestoreCoordinator:
        return RestoreCoordinator(
            record_store=record_store,
            archive_store=archive_store,
            companies=companies,
            synchronizer=synchronizer,
            outbox=outbox,
        )

    # Command Handlers
    archive_handler = provide(ArchiveRecordHandler, scope=Scope.UOW)
    archive_many_handler = provide(ArchiveRecordsHandler, scope=Scope.UOW)
    restore_handler = provide(RestoreRecordHandler, scope=Scope.UOW)

    # Query Handlers
    list_archived_handler = provide(ListArchivedHandler, scope=Scope.UOW)
    get_archived_handler = provide(GetArchivedHandler, scope=Scope.UOW)
