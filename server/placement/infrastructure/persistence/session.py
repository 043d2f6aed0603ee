"""Unit-of-work session shared by the SQL repositories."""

import asyncio
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from placement.domain.shared.error import (
    ConflictError,
    PermissionDeniedError,
    StorageUnavailableError,
)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise driver errors as placement errors."""
    try:
        yield
    except IntegrityError as e:
        raise ConflictError(f"Record already exists or violates a constraint: {e.orig}") from e
    except DBAPIError as e:
        if "permission denied" in str(e.orig).lower():
            raise PermissionDeniedError(f"Database refused the operation: {e.orig}") from e
        raise StorageUnavailableError(f"Database error: {e.orig}") from e


class SerializedSession:
    """One AsyncSession per unit of work, safe to share between concurrent tasks.

    AsyncSession does not allow overlapping statements, so every statement
    goes through a lock. ``isolated()`` additionally wraps a group of
    statements in a savepoint so one failure does not poison the transaction.
    The task holding the lock may keep issuing statements through
    ``execute()`` while inside ``isolated()``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None

    @asynccontextmanager
    async def _hold(self) -> AsyncIterator[None]:
        task = asyncio.current_task()
        if task is not None and self._owner is task:
            yield
            return
        async with self._lock:
            self._owner = task
            try:
                yield
            finally:
                self._owner = None

    async def execute(self, statement: Any) -> Any:
        async with self._hold():
            with translate_errors():
                return await self.session.execute(statement)

    @asynccontextmanager
    async def isolated(self) -> AsyncIterator[AsyncSession]:
        async with self._hold():
            with translate_errors():
                async with self.session.begin_nested():
                    yield self.session


class SQLUnitOfWork:
    """UnitOfWork adapter over the request's SerializedSession."""

    def __init__(self, session: SerializedSession) -> None:
        self._session = session

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        async with self._session.isolated():
            yield
