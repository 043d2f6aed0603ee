import logging
from typing import Any
from uuid import uuid4

import pydantic

from placement.domain.archive.event import RecordRestored
from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.port.archive_store import ArchiveStore
from placement.domain.archive.port.record_store import RecordStore
from placement.domain.company.model.aggregate import Company
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.company.service.lifecycle import LifecycleSynchronizer
from placement.domain.shared.error import (
    ConflictError,
    NotFoundError,
    PlacementError,
    ValidationError,
)
from placement.domain.shared.event import EventId
from placement.domain.shared.outbox import Outbox
from placement.domain.shared.service import Service

logger = logging.getLogger(__name__)


class RestoreCoordinator(Service):
    """Moves archived records back into the primary store.

    The primary copy is written before the archive entry is deleted. Restored
    companies are reconciled immediately since their MOA may have expired
    while archived; a failed reconciliation does not undo the restore.
    """

    record_store: RecordStore
    archive_store: ArchiveStore
    companies: CompanyRepository
    synchronizer: LifecycleSynchronizer
    outbox: Outbox

    async def restore(
        self, record_id: str, kind: EntityKind = EntityKind.COMPANIES
    ) -> dict[str, Any]:
        entry = await self.archive_store.get(kind, record_id)
        if entry is None:
            raise NotFoundError(f"Archived {kind.label.lower()} not found: {record_id}")
        if await self.record_store.get(kind, record_id) is not None:
            raise ConflictError(f"{kind.label} {record_id} is already active")

        record = entry.to_record()
        company: Company | None = None
        if kind is EntityKind.COMPANIES:
            try:
                company = Company.model_validate(record)
            except pydantic.ValidationError as e:
                raise ValidationError(
                    f"Archived company {record_id} cannot be restored: {e.errors()[0]['msg']}"
                ) from e
            await self.companies.add(company)
        else:
            await self.record_store.put(kind, record_id, record)

        await self.archive_store.delete(kind, record_id)
        await self.outbox.append(RecordRestored(id=EventId(uuid4()), kind=kind, record_id=record_id))
        logger.info(f"Restored {kind.value}/{record_id}")

        if company is not None:
            try:
                await self.synchronizer.reconcile_one(company)
            except PlacementError as e:
                logger.warning(f"Restored company {record_id} but reconciliation failed: {e}")
            record = company.model_dump(mode="json")
        return record
