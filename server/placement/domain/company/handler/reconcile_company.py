"""ReconcileCompany - re-evaluates a company after every caller edit."""

import logging

from placement.domain.company.event import CompanyChanged
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.company.service.lifecycle import LifecycleSynchronizer
from placement.domain.shared.event import EventHandler

logger = logging.getLogger(__name__)


class ReconcileCompany(EventHandler[CompanyChanged]):
    companies: CompanyRepository
    synchronizer: LifecycleSynchronizer

    async def handle(self, event: CompanyChanged) -> None:
        company = await self.companies.get(event.company_id)
        if company is None:
            logger.debug(f"Company {event.company_id} no longer active, nothing to reconcile")
            return
        result = await self.synchronizer.reconcile_one(company)
        if result.changed:
            logger.info(
                f"Reconciled company {company.id} after '{event.reason}': "
                f"fields={list(result.updated_fields)} mirror={result.mirror_payload is not None}"
            )
