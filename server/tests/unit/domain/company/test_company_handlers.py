"""Unit tests for company event handlers and the scheduled reconciliation."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from placement.application.event import ServerStarted
from placement.config import Config, LifecycleConfig
from placement.domain.company.event import CompanyChanged, MirrorSyncRequested
from placement.domain.company.handler import (
    ReconcileCompany,
    ReconcileOnStartup,
    SyncMirrorProjection,
)
from placement.domain.company.model.value import CompanyId, MoaStatus
from placement.domain.company.schedule import FullReconciliation
from placement.domain.company.service.lifecycle import (
    LifecycleSynchronizer,
    ReconcileFailure,
    ReconcileReport,
)
from placement.domain.shared.error import StorageUnavailableError, SyncFailure
from placement.domain.shared.event import EventId


def _changed(company_id: str, reason: str = "updated") -> CompanyChanged:
    return CompanyChanged(id=EventId(uuid4()), company_id=CompanyId(company_id), reason=reason)


def _sync(company_id: str) -> MirrorSyncRequested:
    return MirrorSyncRequested(id=EventId(uuid4()), company_id=CompanyId(company_id))


class TestReconcileCompany:
    async def test_reconciles_changed_company(
        self, companies, synchronizer, seed, make_company
    ):
        company = seed(make_company(moa_start_date=date(2024, 1, 1)))
        handler = ReconcileCompany(companies=companies, synchronizer=synchronizer)

        await handler.handle(_changed(company.id))

        assert (await companies.get(company.id)).moa_status is MoaStatus.EXPIRING_SOON

    async def test_skips_company_that_is_gone(self, companies):
        synchronizer = AsyncMock(spec=LifecycleSynchronizer)
        handler = ReconcileCompany(companies=companies, synchronizer=synchronizer)

        await handler.handle(_changed("archived-already"))

        synchronizer.reconcile_one.assert_not_called()

    async def test_write_back_failure_propagates_for_retry(
        self, companies, synchronizer, seed, make_company
    ):
        company = seed(make_company())
        companies.fail_derived_for.add(company.id)
        handler = ReconcileCompany(companies=companies, synchronizer=synchronizer)

        with pytest.raises(SyncFailure):
            await handler.handle(_changed(company.id))


class TestSyncMirrorProjection:
    async def test_pushes_current_projection(self, companies, mirror, seed, make_company):
        company = seed(make_company())
        handler = SyncMirrorProjection(companies=companies, mirror=mirror)

        await handler.handle(_sync(company.id))

        assert mirror.projections[company.id] == company.projection()

    async def test_deletes_projection_of_inactive_company(self, companies, mirror, make_company):
        gone = make_company()
        mirror.projections[gone.id] = gone.projection()
        handler = SyncMirrorProjection(companies=companies, mirror=mirror)

        await handler.handle(_sync(gone.id))

        assert gone.id not in mirror.projections

    async def test_duplicate_requests_converge(self, companies, mirror, seed, make_company):
        company = seed(make_company())
        handler = SyncMirrorProjection(companies=companies, mirror=mirror)

        await handler.handle(_sync(company.id))
        await handler.handle(_sync(company.id))

        assert mirror.projections == {company.id: company.projection()}

    async def test_mirror_failure_propagates(self, companies, mirror, seed, make_company):
        company = seed(make_company())
        mirror.unwritable = True
        handler = SyncMirrorProjection(companies=companies, mirror=mirror)

        with pytest.raises(StorageUnavailableError):
            await handler.handle(_sync(company.id))

    def test_retries_more_than_default(self):
        assert SyncMirrorProjection.__max_retries__ == 5


class TestReconcileOnStartup:
    async def test_runs_full_pass(self):
        synchronizer = AsyncMock(spec=LifecycleSynchronizer)
        handler = ReconcileOnStartup(config=Config(), synchronizer=synchronizer)

        await handler.handle(ServerStarted(id=EventId(uuid4())))

        synchronizer.full_pass.assert_awaited_once()

    async def test_disabled_by_config(self):
        synchronizer = AsyncMock(spec=LifecycleSynchronizer)
        config = Config(lifecycle=LifecycleConfig(reconcile_on_startup=False))
        handler = ReconcileOnStartup(config=config, synchronizer=synchronizer)

        await handler.handle(ServerStarted(id=EventId(uuid4())))

        synchronizer.full_pass.assert_not_called()


class TestFullReconciliation:
    async def test_runs_full_pass(self):
        synchronizer = MagicMock(spec=LifecycleSynchronizer)
        synchronizer.full_pass = AsyncMock(return_value=ReconcileReport(checked=2))

        await FullReconciliation(synchronizer=synchronizer).run()

        synchronizer.full_pass.assert_awaited_once()

    async def test_logs_failures(self, caplog):
        synchronizer = MagicMock(spec=LifecycleSynchronizer)
        synchronizer.full_pass = AsyncMock(
            return_value=ReconcileReport(
                checked=1,
                failures=[ReconcileFailure(company_id=CompanyId("c1"), error="boom")],
            )
        )

        await FullReconciliation(synchronizer=synchronizer).run()

        assert "1 failures" in caplog.text
