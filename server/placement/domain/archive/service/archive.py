import logging
from collections.abc import Iterable
from uuid import uuid4

from placement.domain.archive.event import RecordArchived
from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import ArchiveBatchResult, ArchiveFailure, EntityKind
from placement.domain.archive.port.archive_store import ArchiveStore
from placement.domain.archive.port.record_store import RecordStore
from placement.domain.company.event import MirrorSyncRequested
from placement.domain.company.model.value import CompanyId
from placement.domain.shared.error import (
    ConflictError,
    NotFoundError,
    PlacementError,
    ValidationError,
)
from placement.domain.shared.event import EventId
from placement.domain.shared.outbox import Outbox
from placement.domain.shared.port.clock import Clock
from placement.domain.shared.port.unit_of_work import UnitOfWork
from placement.domain.shared.service import Service

logger = logging.getLogger(__name__)


def _require_role(actor_role: str) -> None:
    if not actor_role or not actor_role.strip():
        raise ValidationError("Actor role is required", field="actor_role")


class ArchiveManager(Service):
    """Soft-deletes records by moving them whole into the archive store.

    The archive copy is written before the primary copy is deleted. A crash
    in between leaves the record in both stores, never in neither.
    """

    record_store: RecordStore
    archive_store: ArchiveStore
    outbox: Outbox
    clock: Clock
    unit_of_work: UnitOfWork

    async def archive(
        self,
        record_id: str,
        actor_role: str,
        kind: EntityKind = EntityKind.COMPANIES,
        expected_version: int | None = None,
    ) -> ArchiveEntry:
        _require_role(actor_role)

        snapshot = await self.record_store.get(kind, record_id)
        if snapshot is None:
            raise NotFoundError(f"{kind.label} not found: {record_id}")
        if expected_version is not None and snapshot.get("version") != expected_version:
            raise ConflictError(
                f"{kind.label} {record_id} was modified (version {snapshot.get('version')}, "
                f"expected {expected_version})"
            )

        entry = ArchiveEntry(
            kind=kind,
            id=record_id,
            snapshot=snapshot,
            deleted_at=self.clock.now(),
            deleted_by_role=actor_role.strip(),
        )
        await self.archive_store.put(entry)
        await self.record_store.delete(kind, record_id)

        if kind is EntityKind.COMPANIES:
            await self.outbox.append(
                MirrorSyncRequested(id=EventId(uuid4()), company_id=CompanyId(record_id))
            )
        await self.outbox.append(
            RecordArchived(
                id=EventId(uuid4()),
                kind=kind,
                record_id=record_id,
                deleted_by_role=entry.deleted_by_role,
            )
        )
        logger.info(f"Archived {kind.value}/{record_id} (by {entry.deleted_by_role})")
        return entry

    async def archive_many(
        self,
        record_ids: Iterable[str],
        actor_role: str,
        kind: EntityKind = EntityKind.COMPANIES,
    ) -> ArchiveBatchResult:
        """Archive each id independently; one failure does not stop the rest.

        Every id runs under its own savepoint, so a failed id leaves no partial
        writes and the ids archived around it still commit.
        """
        _require_role(actor_role)

        archived: list[str] = []
        failures: list[ArchiveFailure] = []
        for record_id in dict.fromkeys(record_ids):
            try:
                async with self.unit_of_work.savepoint():
                    await self.archive(record_id, actor_role, kind)
                archived.append(record_id)
            except PlacementError as e:
                logger.warning(f"Could not archive {kind.value}/{record_id}: {e.message}")
                failures.append(ArchiveFailure(id=record_id, code=e.code, message=e.message))

        return ArchiveBatchResult(
            kind=kind, succeeded=len(archived), archived=archived, failures=failures
        )

    async def get_entry(
        self, record_id: str, kind: EntityKind = EntityKind.COMPANIES
    ) -> ArchiveEntry:
        entry = await self.archive_store.get(kind, record_id)
        if entry is None:
            raise NotFoundError(f"Archived {kind.label.lower()} not found: {record_id}")
        return entry

    async def list_entries(self, kind: EntityKind = EntityKind.COMPANIES) -> list[ArchiveEntry]:
        return await self.archive_store.list(kind)
