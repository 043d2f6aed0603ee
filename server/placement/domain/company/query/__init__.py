from placement.domain.company.query.get_company import (
    CompanyDetail,
    GetCompany,
    GetCompanyHandler,
)
from placement.domain.company.query.list_companies import (
    CompanyList,
    ListCompanies,
    ListCompaniesHandler,
)

__all__ = [
    "CompanyDetail",
    "CompanyList",
    "GetCompany",
    "GetCompanyHandler",
    "ListCompanies",
    "ListCompaniesHandler",
]
