from placement.domain.company.service.company import CompanyService
from placement.domain.company.service.lifecycle import LifecycleSynchronizer

__all__ = ["CompanyService", "LifecycleSynchronizer"]
