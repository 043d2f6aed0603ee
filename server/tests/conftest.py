"""Global test fixtures: in-memory stores standing in for the primary, mirror and archive stores."""

import asyncio
import copy
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from typing import Any

import pytest

from placement.domain.archive.model.entry import ArchiveEntry
from placement.domain.archive.model.value import EntityKind
from placement.domain.archive.service.archive import ArchiveManager
from placement.domain.archive.service.restore import RestoreCoordinator
from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import CompanyId, MirrorProjection, WorkMode
from placement.domain.company.service.company import CompanyService
from placement.domain.company.service.lifecycle import LifecycleSynchronizer
from placement.domain.shared.error import ConflictError, NotFoundError, StorageUnavailableError
from placement.domain.shared.event import Event


class FixedClock:
    def __init__(self, today: date, now: datetime | None = None) -> None:
        self._today = today
        self._now = now or datetime(today.year, today.month, today.day, 9, 0, tzinfo=UTC)

    def today(self) -> date:
        return self._today

    def now(self) -> datetime:
        return self._now

    def advance_to(self, today: date) -> None:
        self._today = today
        self._now = datetime(today.year, today.month, today.day, 9, 0, tzinfo=UTC)


class InMemoryRecords:
    """Primary store documents keyed by (kind, id). Shared by the record store and company repo."""

    def __init__(self) -> None:
        self.docs: dict[tuple[EntityKind, str], dict[str, Any]] = {}
        self.unavailable = False

    def _check(self) -> None:
        if self.unavailable:
            raise StorageUnavailableError("primary store offline")


class InMemoryRecordStore:
    def __init__(self, records: InMemoryRecords) -> None:
        self.records = records
        self.fail_delete_for: set[str] = set()

    async def get(self, kind: EntityKind, record_id: str) -> dict[str, Any] | None:
        self.records._check()
        doc = self.records.docs.get((kind, record_id))
        return dict(doc) if doc is not None else None

    async def put(self, kind: EntityKind, record_id: str, document: dict[str, Any]) -> None:
        self.records._check()
        self.records.docs[(kind, record_id)] = dict(document)

    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        self.records._check()
        if record_id in self.fail_delete_for:
            raise StorageUnavailableError(f"delete rejected for {record_id}")
        return self.records.docs.pop((kind, record_id), None) is not None

    async def list(self, kind: EntityKind) -> list[dict[str, Any]]:
        return [dict(d) for (k, _), d in sorted(self.records.docs.items()) if k is kind]


class InMemoryCompanyRepository:
    def __init__(self, records: InMemoryRecords) -> None:
        self.records = records
        self.derived_writes: list[tuple[CompanyId, dict[str, Any]]] = []
        self.fail_derived_for: set[str] = set()
        self.in_flight = 0
        self.max_in_flight = 0

    async def get(self, company_id: CompanyId) -> Company | None:
        self.records._check()
        doc = self.records.docs.get((EntityKind.COMPANIES, company_id))
        return Company.model_validate(doc) if doc is not None else None

    async def list(self) -> list[Company]:
        self.records._check()
        return [
            Company.model_validate(doc)
            for (kind, _), doc in sorted(self.records.docs.items())
            if kind is EntityKind.COMPANIES
        ]

    async def add(self, company: Company) -> None:
        key = (EntityKind.COMPANIES, company.id)
        if key in self.records.docs:
            raise ConflictError(f"Company already exists: {company.id}")
        self.records.docs[key] = company.model_dump(mode="json")

    async def save(self, company: Company, expected_version: int | None = None) -> None:
        key = (EntityKind.COMPANIES, company.id)
        stored = self.records.docs.get(key)
        if stored is None:
            raise NotFoundError(f"Company not found: {company.id}")
        if expected_version is not None and stored["version"] != expected_version:
            raise ConflictError(f"Company {company.id} was modified concurrently")
        self.records.docs[key] = company.model_dump(mode="json")

    async def apply_derived(self, company_id: CompanyId, fields: dict[str, Any]) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if company_id in self.fail_derived_for:
                raise StorageUnavailableError(f"write rejected for {company_id}")
            key = (EntityKind.COMPANIES, company_id)
            if key not in self.records.docs:
                raise NotFoundError(f"Company not found: {company_id}")
            doc = self.records.docs[key]
            for name, value in fields.items():
                doc[name] = value.value if hasattr(value, "value") else value
            self.derived_writes.append((company_id, dict(fields)))
        finally:
            self.in_flight -= 1


class InMemoryMirror:
    def __init__(self) -> None:
        self.projections: dict[CompanyId, MirrorProjection] = {}
        self.unreadable = False
        self.unwritable = False
        self.puts: list[CompanyId] = []
        self.deletes: list[CompanyId] = []

    async def get(self, company_id: CompanyId) -> MirrorProjection | None:
        if self.unreadable:
            raise StorageUnavailableError("mirror offline")
        return self.projections.get(company_id)

    async def get_many(self, company_ids: Iterable[CompanyId]) -> dict[CompanyId, MirrorProjection]:
        if self.unreadable:
            raise StorageUnavailableError("mirror offline")
        return {cid: self.projections[cid] for cid in company_ids if cid in self.projections}

    async def put(self, company_id: CompanyId, projection: MirrorProjection) -> None:
        if self.unwritable:
            raise StorageUnavailableError("mirror offline")
        self.projections[company_id] = projection
        self.puts.append(company_id)

    async def delete(self, company_id: CompanyId) -> None:
        if self.unwritable:
            raise StorageUnavailableError("mirror offline")
        self.projections.pop(company_id, None)
        self.deletes.append(company_id)

    async def list_ids(self) -> set[CompanyId]:
        if self.unreadable:
            raise StorageUnavailableError("mirror offline")
        return set(self.projections)


class InMemoryArchiveStore:
    def __init__(self) -> None:
        self.entries: dict[tuple[EntityKind, str], ArchiveEntry] = {}

    async def get(self, kind: EntityKind, record_id: str) -> ArchiveEntry | None:
        return self.entries.get((kind, record_id))

    async def put(self, entry: ArchiveEntry) -> None:
        self.entries[(entry.kind, entry.id)] = entry

    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        return self.entries.pop((kind, record_id), None) is not None

    async def list(self, kind: EntityKind) -> list[ArchiveEntry]:
        found = [e for (k, _), e in self.entries.items() if k is kind]
        return sorted(found, key=lambda e: e.deleted_at, reverse=True)


class RecordingOutbox:
    """Outbox stand-in that keeps appended events in memory."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self.delivered: set[Any] = set()

    async def append(self, event: Event) -> None:
        self.events.append(event)

    async def pending(self, event_type: type[Event]) -> list[Any]:
        return [e for e in self.of_type(event_type) if e.id not in self.delivered]

    def deliver(self) -> None:
        """Mark every appended event as picked up by a worker."""
        self.delivered.update(e.id for e in self.events)

    def of_type(self, event_type: type[Event]) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


class InMemoryUnitOfWork:
    """Savepoints over the in-memory stores: a block that raises leaves no trace."""

    def __init__(
        self, records: InMemoryRecords, archive_store: InMemoryArchiveStore, outbox: RecordingOutbox
    ) -> None:
        self.records = records
        self.archive_store = archive_store
        self.outbox = outbox
        self.rolled_back = 0

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        docs = copy.deepcopy(self.records.docs)
        entries = dict(self.archive_store.entries)
        events = list(self.outbox.events)
        try:
            yield
        except Exception:
            self.records.docs = docs
            self.archive_store.entries = entries
            self.outbox.events = events
            self.rolled_back += 1
            raise


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(date(2024, 12, 15))


@pytest.fixture
def records() -> InMemoryRecords:
    return InMemoryRecords()


@pytest.fixture
def record_store(records: InMemoryRecords) -> InMemoryRecordStore:
    return InMemoryRecordStore(records)


@pytest.fixture
def companies(records: InMemoryRecords) -> InMemoryCompanyRepository:
    return InMemoryCompanyRepository(records)


@pytest.fixture
def mirror() -> InMemoryMirror:
    return InMemoryMirror()


@pytest.fixture
def archive_store() -> InMemoryArchiveStore:
    return InMemoryArchiveStore()


@pytest.fixture
def outbox() -> RecordingOutbox:
    return RecordingOutbox()


@pytest.fixture
def synchronizer(
    companies: InMemoryCompanyRepository,
    mirror: InMemoryMirror,
    outbox: RecordingOutbox,
    clock: FixedClock,
) -> LifecycleSynchronizer:
    return LifecycleSynchronizer(
        companies=companies,  # type: ignore[arg-type]
        mirror=mirror,  # type: ignore[arg-type]
        outbox=outbox,  # type: ignore[arg-type]
        clock=clock,
        window_days=30,
        write_concurrency=4,
    )


@pytest.fixture
def company_service(
    companies: InMemoryCompanyRepository, outbox: RecordingOutbox, clock: FixedClock
) -> CompanyService:
    return CompanyService(companies=companies, outbox=outbox, clock=clock)  # type: ignore[arg-type]


@pytest.fixture
def unit_of_work(
    records: InMemoryRecords, archive_store: InMemoryArchiveStore, outbox: RecordingOutbox
) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(records, archive_store, outbox)


@pytest.fixture
def archive_manager(
    record_store: InMemoryRecordStore,
    archive_store: InMemoryArchiveStore,
    outbox: RecordingOutbox,
    clock: FixedClock,
    unit_of_work: InMemoryUnitOfWork,
) -> ArchiveManager:
    return ArchiveManager(
        record_store=record_store,  # type: ignore[arg-type]
        archive_store=archive_store,  # type: ignore[arg-type]
        outbox=outbox,  # type: ignore[arg-type]
        clock=clock,
        unit_of_work=unit_of_work,
    )


@pytest.fixture
def restore_coordinator(
    record_store: InMemoryRecordStore,
    archive_store: InMemoryArchiveStore,
    companies: InMemoryCompanyRepository,
    synchronizer: LifecycleSynchronizer,
    outbox: RecordingOutbox,
) -> RestoreCoordinator:
    return RestoreCoordinator(
        record_store=record_store,  # type: ignore[arg-type]
        archive_store=archive_store,  # type: ignore[arg-type]
        companies=companies,  # type: ignore[arg-type]
        synchronizer=synchronizer,
        outbox=outbox,  # type: ignore[arg-type]
    )


@pytest.fixture
def make_company() -> Callable[..., Company]:
    """Build a valid Company; keyword arguments override any field."""
    counter = iter(range(1, 10_000))

    def _make_company(**overrides: Any) -> Company:
        n = next(counter)
        fields: dict[str, Any] = {
            "id": CompanyId(f"co-{n:03d}"),
            "name": f"Company {n}",
            "description": "Software consultancy",
            "address": "1 Main St",
            "contact_email": f"hr{n}@example.com",
            "website": "https://example.com",
            "fields_of_work": ["Software"],
            "skills_required": ["Python"],
            "mode_of_work": [WorkMode.HYBRID],
            "moa_present": True,
            "moa_validity_years": 1,
            "moa_start_date": date(2024, 6, 1),
            "created_at": datetime(2024, 6, 1, tzinfo=UTC),
            "updated_at": datetime(2024, 6, 1, tzinfo=UTC),
        }
        fields.update(overrides)
        return Company(**fields)

    return _make_company


@pytest.fixture
def seed(
    records: InMemoryRecords,
) -> Callable[[Company], Company]:
    """Store a company directly in the primary store."""

    def _seed(company: Company) -> Company:
        records.docs[(EntityKind.COMPANIES, company.id)] = company.model_dump(mode="json")
        return company

    return _seed
