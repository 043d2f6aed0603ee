"""FullReconciliation - scheduled pass over every active company."""

import logging
from dataclasses import dataclass
from typing import Any

from placement.domain.company.service.lifecycle import LifecycleSynchronizer
from placement.domain.shared.event import Schedule

logger = logging.getLogger(__name__)


@dataclass
class FullReconciliation(Schedule):
    """Re-evaluates every company against today's date and prunes orphaned projections.

    Expirations pass with no write to the record, so only a time-driven
    pass notices a company moving from valid to expiring-soon to expired.
    """

    synchronizer: LifecycleSynchronizer

    async def run(self, **params: Any) -> None:
        report = await self.synchronizer.full_pass()
        if report.failures:
            logger.warning(
                "Scheduled reconciliation finished with %d failures", len(report.failures)
            )
