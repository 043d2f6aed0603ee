from placement.config import Config
from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import CompanyId
from placement.domain.company.service.company import CompanyService
from placement.domain.company.service.evaluator import (
    AssignmentCheck,
    MoaEvaluation,
    assignment_check,
    evaluate_company,
)
from placement.domain.shared.port.clock import Clock
from placement.domain.shared.query import Query, QueryHandler, Result


class GetCompany(Query):
    id: CompanyId


class CompanyDetail(Result):
    company: Company
    evaluation: MoaEvaluation
    message: str
    assignment: AssignmentCheck


class GetCompanyHandler(QueryHandler[GetCompany, CompanyDetail]):
    company_service: CompanyService
    clock: Clock
    config: Config

    async def run(self, query: GetCompany) -> CompanyDetail:
        company = await self.company_service.get(query.id)
        # Evaluated live: the stored status may lag until the next reconciliation
        evaluation = evaluate_company(
            company, self.clock.today(), self.config.lifecycle.window_days
        )
        return CompanyDetail(
            company=company,
            evaluation=evaluation,
            message=evaluation.message,
            assignment=assignment_check(evaluation),
        )
