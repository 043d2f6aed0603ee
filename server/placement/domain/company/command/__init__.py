from placement.domain.company.command.create_company import (
    CompanyCreated,
    CreateCompany,
    CreateCompanyHandler,
)
from placement.domain.company.command.reconcile import (
    ReconciliationReport,
    RunReconciliation,
    RunReconciliationHandler,
)
from placement.domain.company.command.renew_moa import MoaRenewed, RenewMoa, RenewMoaHandler
from placement.domain.company.command.update_company import (
    CompanyUpdated,
    UpdateCompany,
    UpdateCompanyHandler,
)

__all__ = [
    "CompanyCreated",
    "CompanyUpdated",
    "CreateCompany",
    "CreateCompanyHandler",
    "MoaRenewed",
    "ReconciliationReport",
    "RenewMoa",
    "RenewMoaHandler",
    "RunReconciliation",
    "RunReconciliationHandler",
    "UpdateCompany",
    "UpdateCompanyHandler",
]
