"""SyncMirrorProjection - pushes or removes a company's mirror projection.

Always converges on the primary store's current state, so retries and
duplicate requests are harmless. Failures propagate to the worker, which
retries with backoff and dead-letters the delivery after the last attempt.
"""

import logging

from placement.domain.company.event import MirrorSyncRequested
from placement.domain.company.port.mirror import MirrorStore
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.shared.event import EventHandler

logger = logging.getLogger(__name__)


class SyncMirrorProjection(EventHandler[MirrorSyncRequested]):
    __max_retries__ = 5

    companies: CompanyRepository
    mirror: MirrorStore

    async def handle(self, event: MirrorSyncRequested) -> None:
        company = await self.companies.get(event.company_id)
        if company is None:
            await self.mirror.delete(event.company_id)
            logger.info(f"Removed mirror projection for company {event.company_id}")
            return

        await self.mirror.put(company.id, company.projection())
        logger.debug(f"Pushed mirror projection for company {company.id}")
