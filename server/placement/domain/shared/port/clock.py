from abc import abstractmethod
from datetime import date, datetime
from typing import Protocol

from placement.domain.shared.port import Port


class Clock(Port, Protocol):
    """Source of "today" for MOA evaluation.

    Injected so status evaluation stays deterministic under test.
    """

    @abstractmethod
    def today(self) -> date: ...

    @abstractmethod
    def now(self) -> datetime: ...
