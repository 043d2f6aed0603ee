from placement.config import Config
from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import MoaStatus
from placement.domain.company.service.company import CompanyService
from placement.domain.company.service.evaluator import evaluate_company, summarize
from placement.domain.shared.port.clock import Clock
from placement.domain.shared.query import Query, QueryHandler, Result


class ListCompanies(Query):
    status: MoaStatus | None = None


class CompanyList(Result):
    items: list[Company]
    total: int
    moa_summary: dict[MoaStatus, int]


class ListCompaniesHandler(QueryHandler[ListCompanies, CompanyList]):
    company_service: CompanyService
    clock: Clock
    config: Config

    async def run(self, query: ListCompanies) -> CompanyList:
        companies = sorted(await self.company_service.list(), key=lambda c: c.name.lower())
        summary = summarize(companies, self.clock.today(), self.config.lifecycle.window_days)
        if query.status is not None:
            today = self.clock.today()
            companies = [
                c
                for c in companies
                if evaluate_company(c, today, self.config.lifecycle.window_days).status
                == query.status
            ]
        return CompanyList(items=companies, total=len(companies), moa_summary=summary)
