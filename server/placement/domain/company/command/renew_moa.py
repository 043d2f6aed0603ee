from datetime import date

import logfire

from placement.domain.company.model.value import CompanyId
from placement.domain.company.service.company import CompanyService
from placement.domain.shared.command import Command, CommandHandler, Result


class RenewMoa(Command):
    id: CompanyId
    version: int | None = None


class MoaRenewed(Result):
    id: CompanyId
    version: int
    moa_start_date: date
    moa_expiration_date: date


class RenewMoaHandler(CommandHandler[RenewMoa, MoaRenewed]):
    company_service: CompanyService

    async def run(self, cmd: RenewMoa) -> MoaRenewed:
        with logfire.span("RenewMoa"):
            company = await self.company_service.renew_moa(cmd.id, expected_version=cmd.version)
            assert company.moa_start_date is not None
            assert company.moa_expiration_date is not None
            return MoaRenewed(
                id=company.id,
                version=company.version,
                moa_start_date=company.moa_start_date,
                moa_expiration_date=company.moa_expiration_date,
            )
