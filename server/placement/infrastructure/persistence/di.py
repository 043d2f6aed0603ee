from typing import AsyncIterable

from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from placement.config import Config
from placement.domain.archive.port import ArchiveStore, RecordStore
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.shared.port.clock import Clock
from placement.domain.shared.port.event_repository import EventRepository
from placement.domain.shared.port.unit_of_work import UnitOfWork
from placement.infrastructure.clock import SystemClock
from placement.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from placement.infrastructure.persistence.repository.archive import SQLArchiveStore
from placement.infrastructure.persistence.repository.company import SQLCompanyRepository
from placement.infrastructure.persistence.repository.event import SQLAlchemyEventRepository
from placement.infrastructure.persistence.repository.record import SQLRecordStore
from placement.infrastructure.persistence.session import SerializedSession, SQLUnitOfWork
from placement.util.di.base import Provider
from placement.util.di.scope import Scope


class PersistenceProvider(Provider):
    # APP-scoped factories
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_clock(self, config: Config) -> Clock:
        return SystemClock(config.lifecycle.timezone)

    # UOW-scoped session (one per unit of work, committed when the scope closes)
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[SerializedSession]:
        async with session_factory() as session:
            yield SerializedSession(session)
            await session.commit()

    # UOW-scoped repositories
    company_repo = provide(SQLCompanyRepository, scope=Scope.UOW, provides=CompanyRepository)
    record_store = provide(SQLRecordStore, scope=Scope.UOW, provides=RecordStore)
    archive_store = provide(SQLArchiveStore, scope=Scope.UOW, provides=ArchiveStore)
    event_repo = provide(SQLAlchemyEventRepository, scope=Scope.UOW, provides=EventRepository)
    unit_of_work = provide(SQLUnitOfWork, scope=Scope.UOW, provides=UnitOfWork)
