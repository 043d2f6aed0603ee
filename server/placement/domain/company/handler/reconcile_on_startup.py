"""ReconcileOnStartup - full reconciliation pass when the server starts.

Statuses drift while the server is down (expirations pass), so a pass on
startup restores derived fields before the first scheduled run.
"""

import logging

from placement.application.event import ServerStarted
from placement.config import Config
from placement.domain.company.service.lifecycle import LifecycleSynchronizer
from placement.domain.shared.event import EventHandler

logger = logging.getLogger(__name__)


class ReconcileOnStartup(EventHandler[ServerStarted]):
    config: Config
    synchronizer: LifecycleSynchronizer

    async def handle(self, event: ServerStarted) -> None:
        if not self.config.lifecycle.reconcile_on_startup:
            logger.debug("Startup reconciliation disabled")
            return
        await self.synchronizer.full_pass()
