from placement.domain.company.util.di.provider import CompanyProvider

__all__ = ["CompanyProvider"]
