from dishka import provide

from placement.config import Config
from placement.domain.company.command import (
    CreateCompanyHandler,
    RenewMoaHandler,
    RunReconciliationHandler,
    UpdateCompanyHandler,
)
from placement.domain.company.port.mirror import MirrorStore
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.company.query import GetCompanyHandler, ListCompaniesHandler
from placement.domain.company.service.company import CompanyService
from placement.domain.company.service.lifecycle import LifecycleSynchronizer
from placement.domain.shared.outbox import Outbox
from placement.domain.shared.port.clock import Clock
from placement.util.di.base import Provider
from placement.util.di.scope import Scope


class CompanyProvider(Provider):
    @provide(scope=Scope.UOW)
    def get_company_service(
        self,
        companies: CompanyRepository,
        outbox: Outbox,
        clock: Clock,
    ) -> CompanyService:
        return CompanyService(companies=companies, outbox=outbox, clock=clock)

    @provide(scope=Scope.UOW)
    def get_synchronizer(
        self,
        companies: CompanyRepository,
        mirror: MirrorStore,
        outbox: Outbox,
        clock: Clock,
        config: Config,
    ) -> LifecycleSynchronizer:
        return LifecycleSynchronizer(
            companies=companies,
            mirror=mirror,
            outbox=outbox,
            clock=clock,
            window_days=config.lifecycle.window_days,
            write_concurrency=config.lifecycle.write_concurrency,
        )

    # Command Handlers
    create_handler = provide(CreateCompanyHandler, scope=Scope.UOW)
    update_handler = provide(UpdateCompanyHandler, scope=Scope.UOW)
    renew_moa_handler = provide(RenewMoaHandler, scope=Scope.UOW)
    reconcile_handler = provide(RunReconciliationHandler, scope=Scope.UOW)

    # Query Handlers
    get_company_handler = provide(GetCompanyHandler, scope=Scope.UOW)
    list_companies_handler = provide(ListCompaniesHandler, scope=Scope.UOW)
