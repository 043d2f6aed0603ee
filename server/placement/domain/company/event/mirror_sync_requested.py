from placement.domain.company.model.value import CompanyId
from placement.domain.shared.event import Event


class MirrorSyncRequested(Event):
    """The mirror projection for a company must be brought in line with the primary store."""

    company_id: CompanyId
