from contextlib import AbstractAsyncContextManager
from typing import Protocol

from placement.domain.shared.port import Port


class UnitOfWork(Port, Protocol):
    """The transaction that the current request or worker batch commits on exit."""

    def savepoint(self) -> AbstractAsyncContextManager[None]:
        """Group writes so they are rolled back together when the block raises.

        The rest of the unit of work stays usable and still commits.
        """
        ...
