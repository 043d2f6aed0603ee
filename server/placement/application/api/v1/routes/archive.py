"""Archive and restore REST routes."""

from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from placement.application.api.v1.routes._body import build
from placement.domain.archive.command import (
    ArchiveRecord,
    ArchiveRecordHandler,
    ArchiveRecords,
    ArchiveRecordsHandler,
    RecordArchivedResult,
    RecordRestoredResult,
    RecordsArchived,
    RestoreRecord,
    RestoreRecordHandler,
)
from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.query import (
    ArchivedDetail,
    ArchivedList,
    GetArchived,
    GetArchivedHandler,
    ListArchived,
    ListArchivedHandler,
)

router = APIRouter(prefix="/archive", tags=["Archive"], route_class=DishkaRoute)


@router.get("/{kind}", response_model=ArchivedList)
async def list_archived(
    kind: EntityKind,
    handler: FromDishka[ListArchivedHandler],
) -> ArchivedList:
    return await handler.run(ListArchived(kind=kind))


@router.post("/{kind}", response_model=RecordsArchived)
async def archive_records(
    kind: EntityKind,
    body: dict[str, Any],
    handler: FromDishka[ArchiveRecordsHandler],
) -> RecordsArchived:
    """Archive many records. Per-record failures are reported, not raised."""
    return await handler.run(build(ArchiveRecords, body, kind=kind))


@router.get("/{kind}/{record_id}", response_model=ArchivedDetail)
async def get_archived(
    kind: EntityKind,
    record_id: str,
    handler: FromDishka[GetArchivedHandler],
) -> ArchivedDetail:
    return await handler.run(GetArchived(kind=kind, id=record_id))


@router.post("/{kind}/{record_id}", response_model=RecordArchivedResult)
async def archive_record(
    kind: EntityKind,
    record_id: str,
    body: dict[str, Any],
    handler: FromDishka[ArchiveRecordHandler],
) -> RecordArchivedResult:
    return await handler.run(build(ArchiveRecord, body, kind=kind, id=record_id))


@router.post("/{kind}/{record_id}/restore", response_model=RecordRestoredResult)
async def restore_record(
    kind: EntityKind,
    record_id: str,
    handler: FromDishka[RestoreRecordHandler],
) -> RecordRestoredResult:
    return await handler.run(RestoreRecord(kind=kind, id=record_id))
