from placement.domain.company.port.mirror import MirrorStore
from placement.domain.company.port.repository import CompanyRepository

__all__ = ["CompanyRepository", "MirrorStore"]
