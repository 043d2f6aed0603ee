from datetime import date

import logfire
from pydantic import Field

from placement.domain.company.model.value import Attribution, CompanyId, WorkMode
from placement.domain.company.service.company import CompanyService
from placement.domain.shared.command import Command, CommandHandler, Result


class CreateCompany(Command):
    name: str
    description: str = ""
    address: str = ""
    contact_email: str = ""
    website: str = ""
    fields_of_work: list[str] = Field(default_factory=list)
    skills_required: list[str] = Field(default_factory=list)
    mode_of_work: list[WorkMode] = Field(default_factory=list)
    moa_present: bool = True
    moa_validity_years: int | None = Field(default=None, gt=0)
    moa_start_date: date | None = None
    created_by: Attribution | None = None


class CompanyCreated(Result):
    id: CompanyId
    version: int


class CreateCompanyHandler(CommandHandler[CreateCompany, CompanyCreated]):
    company_service: CompanyService

    async def run(self, cmd: CreateCompany) -> CompanyCreated:
        with logfire.span("CreateCompany"):
            profile = cmd.model_dump(exclude={"created_by"})
            company = await self.company_service.create(profile, created_by=cmd.created_by)
            logfire.info("Company created", company_id=company.id)
            return CompanyCreated(id=company.id, version=company.version)
