from datetime import date

import logfire
from pydantic import Field

from placement.domain.company.model.value import CompanyId, WorkMode
from placement.domain.company.service.company import CompanyService
from placement.domain.shared.command import Command, CommandHandler, Result


class UpdateCompany(Command):
    """Caller-editable fields. Omitted fields are left unchanged."""

    id: CompanyId
    version: int
    name: str | None = None
    description: str | None = None
    address: str | None = None
    contact_email: str | None = None
    website: str | None = None
    fields_of_work: list[str] | None = None
    skills_required: list[str] | None = None
    mode_of_work: list[WorkMode] | None = None
    moa_present: bool | None = None
    moa_validity_years: int | None = Field(default=None, gt=0)
    moa_start_date: date | None = None


class CompanyUpdated(Result):
    id: CompanyId
    version: int


class UpdateCompanyHandler(CommandHandler[UpdateCompany, CompanyUpdated]):
    company_service: CompanyService

    async def run(self, cmd: UpdateCompany) -> CompanyUpdated:
        with logfire.span("UpdateCompany"):
            changes = cmd.model_dump(exclude={"id", "version"}, exclude_none=True)
            company = await self.company_service.update(cmd.id, changes, cmd.version)
            return CompanyUpdated(id=company.id, version=company.version)
