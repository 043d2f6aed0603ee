from placement.domain.company.model.value import CompanyId
from placement.domain.shared.event import Event


class CompanyChanged(Event):
    """A caller created or edited a company."""

    company_id: CompanyId
    reason: str
