"""Unit tests for the lifecycle synchronizer."""

from datetime import date

import pytest

from placement.domain.company.event import MirrorSyncRequested
from placement.domain.company.model.value import MoaStatus
from placement.domain.shared.error import SyncFailure


def _consistent(make_company, mirror, **overrides):
    """A company whose derived fields and mirror projection are already current."""
    company = make_company(moa_status=MoaStatus.VALID, visible_to_mobile=True, **overrides)
    mirror.projections[company.id] = company.projection()
    return company


class TestPlan:
    def test_plan_is_pure(self, synchronizer, make_company, mirror, clock, companies, outbox):
        company = make_company()

        result = synchronizer.plan(company, None, clock.today())

        assert result.updated_fields == {
            "moa_status": MoaStatus.VALID,
            "visible_to_mobile": True,
        }
        assert result.mirror_payload == company.projection()
        assert companies.derived_writes == []
        assert outbox.events == []


class TestReconcileOne:
    async def test_writes_derived_fields_and_requests_mirror_push(
        self, synchronizer, seed, make_company, companies, outbox
    ):
        company = seed(make_company(moa_start_date=date(2024, 1, 1)))

        result = await synchronizer.reconcile_one(company)

        assert result.updated_fields == {
            "moa_status": MoaStatus.EXPIRING_SOON,
            "visible_to_mobile": True,
        }
        stored = await companies.get(company.id)
        assert stored.moa_status is MoaStatus.EXPIRING_SOON
        assert stored.visible_to_mobile is True
        assert stored.version == company.version
        assert [e.company_id for e in outbox.of_type(MirrorSyncRequested)] == [company.id]

    async def test_consistent_company_issues_no_writes(
        self, synchronizer, seed, make_company, mirror, companies, outbox
    ):
        company = seed(_consistent(make_company, mirror))

        result = await synchronizer.reconcile_one(company)

        assert not result.changed
        assert companies.derived_writes == []
        assert outbox.events == []

    async def test_second_call_in_succession_is_a_no_op(
        self, synchronizer, seed, make_company, companies, outbox
    ):
        company = seed(make_company(moa_start_date=date(2023, 1, 1)))
        await synchronizer.reconcile_one(company)
        writes, events = len(companies.derived_writes), len(outbox.events)

        again = await synchronizer.reconcile_one(await companies.get(company.id))

        assert not again.changed
        assert len(companies.derived_writes) == writes
        assert len(outbox.events) == events

    async def test_second_call_after_push_is_a_no_op(
        self, synchronizer, seed, make_company, mirror, companies, outbox
    ):
        company = seed(make_company(moa_start_date=date(2023, 1, 1)))
        await synchronizer.reconcile_one(company)
        outbox.deliver()
        mirror.projections[company.id] = company.projection()
        events = len(outbox.events)

        again = await synchronizer.reconcile_one(await companies.get(company.id))

        assert not again.changed
        assert len(outbox.events) == events

    async def test_drift_after_delivered_push_is_requested_again(
        self, synchronizer, seed, make_company, companies, outbox
    ):
        company = seed(make_company(moa_start_date=date(2023, 1, 1)))
        await synchronizer.reconcile_one(company)
        outbox.deliver()

        again = await synchronizer.reconcile_one(await companies.get(company.id))

        assert again.mirror_payload is not None
        assert len(outbox.of_type(MirrorSyncRequested)) == 2

    async def test_expired_company_is_hidden(self, synchronizer, seed, make_company, companies):
        company = seed(
            make_company(
                moa_start_date=date(2023, 1, 1),
                moa_status=MoaStatus.VALID,
                visible_to_mobile=True,
            )
        )

        await synchronizer.reconcile_one(company)

        stored = await companies.get(company.id)
        assert stored.moa_status is MoaStatus.EXPIRED
        assert stored.visible_to_mobile is False

    async def test_unreadable_mirror_still_updates_and_requests_push(
        self, synchronizer, seed, make_company, mirror, outbox
    ):
        company = seed(_consistent(make_company, mirror))
        mirror.unreadable = True

        result = await synchronizer.reconcile_one(company)

        assert result.mirror_payload is not None
        assert len(outbox.of_type(MirrorSyncRequested)) == 1

    async def test_write_back_failure_raises_sync_failure(
        self, synchronizer, seed, make_company, companies, outbox
    ):
        company = seed(make_company())
        companies.fail_derived_for.add(company.id)

        with pytest.raises(SyncFailure):
            await synchronizer.reconcile_one(company)

        assert outbox.events == []

    async def test_projection_drift_pushes_without_field_writes(
        self, synchronizer, seed, make_company, mirror, companies, outbox
    ):
        company = seed(_consistent(make_company, mirror))
        mirror.projections[company.id] = company.projection().model_copy(update={"name": "Old"})

        result = await synchronizer.reconcile_one(company)

        assert result.updated_fields == {}
        assert companies.derived_writes == []
        assert len(outbox.of_type(MirrorSyncRequested)) == 1


class TestReconcileAll:
    async def test_one_failure_does_not_stop_the_rest(
        self, synchronizer, seed, make_company, companies
    ):
        batch = [seed(make_company()) for _ in range(5)]
        companies.fail_derived_for.add(batch[2].id)

        report = await synchronizer.reconcile_all(batch)

        assert report.checked == 5
        assert report.updated == 4
        assert [f.company_id for f in report.failures] == [batch[2].id]
        for company in batch:
            stored = await companies.get(company.id)
            expected = MoaStatus.NO_MOA if company.id == batch[2].id else MoaStatus.VALID
            assert stored.moa_status is expected

    async def test_write_concurrency_is_bounded(self, synchronizer, seed, make_company, companies):
        batch = [seed(make_company()) for _ in range(12)]

        await synchronizer.reconcile_all(batch)

        assert len(companies.derived_writes) == 12
        assert 1 <= companies.max_in_flight <= synchronizer.write_concurrency

    async def test_consistent_companies_are_skipped(
        self, synchronizer, seed, make_company, mirror, companies, outbox
    ):
        batch = [seed(_consistent(make_company, mirror)) for _ in range(3)]

        report = await synchronizer.reconcile_all(batch)

        assert report.updated == 0
        assert report.mirror_requested == 0
        assert companies.derived_writes == []
        assert outbox.events == []

    async def test_repeat_pass_requests_nothing_new(
        self, synchronizer, seed, make_company, companies, outbox
    ):
        batch = [seed(make_company()) for _ in range(3)]
        first = await synchronizer.reconcile_all(batch)
        events = len(outbox.events)

        second = await synchronizer.reconcile_all(await companies.list())

        assert first.mirror_requested == 3
        assert second.updated == 0
        assert second.mirror_requested == 0
        assert len(outbox.events) == events

    async def test_unreadable_mirror_skips_projection_checks(
        self, synchronizer, seed, make_company, mirror, outbox
    ):
        stale = seed(make_company(moa_start_date=date(2023, 1, 1)))
        current = seed(_consistent(make_company, mirror))
        mirror.unreadable = True

        report = await synchronizer.reconcile_all([stale, current])

        assert report.updated == 1
        assert report.mirror_requested == 0
        assert outbox.events == []


class TestFullPass:
    async def test_requests_removal_of_orphaned_projections(
        self, synchronizer, seed, make_company, mirror, outbox
    ):
        company = seed(_consistent(make_company, mirror))
        orphan = make_company()
        mirror.projections[orphan.id] = orphan.projection()

        report = await synchronizer.full_pass()

        assert report.checked == 1
        assert report.orphans == 1
        assert [e.company_id for e in outbox.of_type(MirrorSyncRequested)] == [orphan.id]
        assert company.id != orphan.id

    async def test_queued_orphan_removal_is_not_repeated(
        self, synchronizer, make_company, mirror, outbox
    ):
        orphan = make_company()
        mirror.projections[orphan.id] = orphan.projection()

        await synchronizer.full_pass()
        await synchronizer.full_pass()

        assert [e.company_id for e in outbox.of_type(MirrorSyncRequested)] == [orphan.id]

    async def test_orphan_listing_failure_keeps_report(
        self, synchronizer, seed, make_company, mirror
    ):
        seed(make_company())
        mirror.unreadable = True

        report = await synchronizer.full_pass()

        assert report.checked == 1
        assert report.orphans == 0

    async def test_empty_store(self, synchronizer):
        report = await synchronizer.full_pass()
        assert report.checked == 0
        assert report.failures == []
