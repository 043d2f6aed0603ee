"""Lifecycle synchronizer: keeps derived MOA fields and the mirror projection current."""

import asyncio
import logging
from collections.abc import Set
from datetime import date
from typing import Any
from uuid import uuid4

from placement.domain.company.event import MirrorSyncRequested
from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import CompanyId, MirrorProjection
from placement.domain.company.port.mirror import MirrorStore
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.company.service.evaluator import WINDOW_DAYS, evaluate_company
from placement.domain.shared.error import PlacementError, SyncFailure
from placement.domain.shared.event import EventId
from placement.domain.shared.model.value import ValueObject
from placement.domain.shared.outbox import Outbox
from placement.domain.shared.port.clock import Clock
from placement.domain.shared.service import Service

logger = logging.getLogger(__name__)

# Sentinel for "mirror state could not be read"
_UNKNOWN = object()


class ReconcileResult(ValueObject):
    company_id: CompanyId
    updated_fields: dict[str, Any] = {}
    mirror_payload: MirrorProjection | None = None

    @property
    def changed(self) -> bool:
        return bool(self.updated_fields) or self.mirror_payload is not None


class ReconcileFailure(ValueObject):
    company_id: CompanyId
    error: str


class ReconcileReport(ValueObject):
    checked: int = 0
    updated: int = 0
    mirror_requested: int = 0
    orphans: int = 0
    failures: list[ReconcileFailure] = []


class LifecycleSynchronizer(Service):
    companies: CompanyRepository
    mirror: MirrorStore
    outbox: Outbox
    clock: Clock
    window_days: int = WINDOW_DAYS
    write_concurrency: int = 8

    def plan(
        self,
        company: Company,
        current: Any,
        today: date,
        queued: Set[CompanyId] = frozenset(),
    ) -> ReconcileResult:
        """Compute what reconciling ``company`` would write. No I/O.

        ``current`` is the mirror's projection, None when absent, or _UNKNOWN
        when the mirror could not be read (a push is requested in that case).
        ``queued`` holds companies whose mirror sync request is still waiting
        in the outbox; no second request is made for them.
        """
        evaluation = evaluate_company(company, today, self.window_days)
        updated: dict[str, Any] = {}
        if company.moa_status != evaluation.status:
            updated["moa_status"] = evaluation.status
        if company.visible_to_mobile != evaluation.visible:
            updated["visible_to_mobile"] = evaluation.visible

        desired = company.projection()
        stale = current is _UNKNOWN or current != desired
        payload = desired if stale and company.id not in queued else None
        return ReconcileResult(company_id=company.id, updated_fields=updated, mirror_payload=payload)

    async def reconcile_one(self, company: Company) -> ReconcileResult:
        """Bring one company's derived fields and mirror projection up to date.

        A company that is already consistent issues no writes. Raises
        SyncFailure when the derived-field write-back fails.
        """
        try:
            current: Any = await self.mirror.get(company.id)
        except PlacementError as e:
            logger.warning(f"Mirror read failed for company {company.id}: {e}")
            current = _UNKNOWN

        result = self.plan(company, current, self.clock.today(), await self._queued_syncs())
        await self._execute(company, result)
        return result

    async def reconcile_all(self, companies: list[Company]) -> ReconcileReport:
        """Reconcile every given company.

        Mirror state is read once for the whole set. Write-backs run
        concurrently (bounded by ``write_concurrency``); a failure on one
        company is logged and reported without stopping the others.
        """
        today = self.clock.today()
        mirrored: dict[CompanyId, MirrorProjection] | None
        try:
            mirrored = await self.mirror.get_many([c.id for c in companies])
        except PlacementError as e:
            logger.warning(f"Mirror unreadable, skipping projection checks this pass: {e}")
            mirrored = None

        queued = await self._queued_syncs()
        plans = [
            (
                c,
                self.plan(
                    c, c.projection() if mirrored is None else mirrored.get(c.id), today, queued
                ),
            )
            for c in companies
        ]
        pending = [(c, r) for c, r in plans if r.changed]
        semaphore = asyncio.Semaphore(max(1, self.write_concurrency))
        failures: list[ReconcileFailure] = []

        async def run(company: Company, result: ReconcileResult) -> bool:
            async with semaphore:
                try:
                    await self._execute(company, result)
                    return True
                except Exception as e:
                    logger.error(f"Reconciliation failed for company {company.id}: {e}")
                    failures.append(ReconcileFailure(company_id=company.id, error=str(e)))
                    return False

        outcomes = await asyncio.gather(*(run(c, r) for c, r in pending))
        done = [r for (_, r), ok in zip(pending, outcomes) if ok]

        report = ReconcileReport(
            checked=len(companies),
            updated=sum(1 for r in done if r.updated_fields),
            mirror_requested=sum(1 for r in done if r.mirror_payload is not None),
            failures=failures,
        )
        logger.info(
            f"Reconciled {report.checked} companies: {report.updated} updated, "
            f"{report.mirror_requested} mirror pushes, {len(report.failures)} failures"
        )
        return report

    async def _execute(self, company: Company, result: ReconcileResult) -> None:
        if result.updated_fields:
            try:
                await self.companies.apply_derived(company.id, result.updated_fields)
            except PlacementError as e:
                raise SyncFailure(f"Status write-back failed for company {company.id}: {e}") from e
            for name, value in result.updated_fields.items():
                setattr(company, name, value)
            logger.debug(f"Company {company.id} derived fields updated: {result.updated_fields}")

        if result.mirror_payload is not None:
            await self.outbox.append(
                MirrorSyncRequested(id=EventId(uuid4()), company_id=company.id)
            )

    async def full_pass(self) -> ReconcileReport:
        """Reconcile every active company, then request removal of orphaned projections."""
        companies = await self.companies.list()
        report = await self.reconcile_all(companies)

        try:
            orphans = await self.mirror.list_ids() - {c.id for c in companies}
        except PlacementError as e:
            logger.warning(f"Could not list mirror projections, orphan check skipped: {e}")
            return report

        for company_id in sorted(orphans - await self._queued_syncs()):
            await self.outbox.append(MirrorSyncRequested(id=EventId(uuid4()), company_id=company_id))
        if orphans:
            logger.info(f"Requested removal of {len(orphans)} orphaned mirror projections")
        return report.model_copy(update={"orphans": len(orphans)})

    async def _queued_syncs(self) -> set[CompanyId]:
        return {e.company_id for e in await self.outbox.pending(MirrorSyncRequested)}
