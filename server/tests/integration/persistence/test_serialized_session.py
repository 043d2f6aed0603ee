"""SerializedSession: statement serialization and savepoints."""

import asyncio

import pytest
from sqlalchemy import func, select

from placement.domain.archive.model.value import EntityKind
from placement.infrastructure.persistence.repository.record import SQLRecordStore
from placement.infrastructure.persistence.session import SQLUnitOfWork
from placement.infrastructure.persistence.tables import records_table


async def record_count(session) -> int:
    result = await session.execute(select(func.count()).select_from(records_table))
    return result.scalar()


class TestIsolated:
    async def test_statements_inside_savepoint_do_not_block(self, session):
        store = SQLRecordStore(session)

        async with session.isolated():
            await asyncio.wait_for(
                store.put(EntityKind.STUDENTS, "s-1", {"name": "Kim"}), timeout=5
            )

        assert await record_count(session) == 1

    async def test_failed_savepoint_rolls_back_only_its_writes(self, session):
        store = SQLRecordStore(session)
        await store.put(EntityKind.STUDENTS, "s-1", {"name": "Kim"})

        with pytest.raises(RuntimeError):
            async with SQLUnitOfWork(session).savepoint():
                await store.put(EntityKind.STUDENTS, "s-2", {"name": "Lee"})
                raise RuntimeError("abort")

        assert await store.get(EntityKind.STUDENTS, "s-1") is not None
        assert await store.get(EntityKind.STUDENTS, "s-2") is None

    async def test_other_tasks_wait_for_the_savepoint(self, session):
        store = SQLRecordStore(session)
        order: list[str] = []

        async def outside() -> None:
            await store.put(EntityKind.STUDENTS, "s-out", {"name": "Out"})
            order.append("outside")

        async with session.isolated():
            task = asyncio.create_task(outside())
            await asyncio.sleep(0)
            await store.put(EntityKind.STUDENTS, "s-in", {"name": "In"})
            order.append("inside")
        await task

        assert order == ["inside", "outside"]
        assert await record_count(session) == 2
