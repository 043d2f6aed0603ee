"""Domain events, event handlers, scheduled tasks, and worker state."""

from abc import ABC, ABCMeta, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import (
    Any,
    ClassVar,
    Generic,
    Iterator,
    NewType,
    TypeVar,
    dataclass_transform,
    get_args,
    get_origin,
)
from uuid import UUID

from pydantic import Field, PrivateAttr

from placement.domain.shared.model.entity import Entity

EventId = NewType("EventId", UUID)

E = TypeVar("E", bound="Event")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Event(Entity):
    """Base class for domain events.

    Subclasses are registered by class name in Event._registry so the
    event repository can deserialize stored payloads.
    """

    id: EventId
    created_at: datetime = Field(default_factory=_utc_now)

    # Set by the event repository when the event is claimed for a consumer group
    _delivery_id: str | None = PrivateAttr(default=None)

    _registry: ClassVar[dict[str, type["Event"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry[cls.__name__] = cls

    @property
    def delivery_id(self) -> str | None:
        return self._delivery_id

    def attach_delivery(self, delivery_id: str) -> None:
        self._delivery_id = delivery_id


# --- Worker state ---


@dataclass(frozen=True)
class WorkerConfig:
    """Configuration for a single worker instance.

    Attributes:
        name: Unique worker identifier (also the consumer group).
        event_types: Event types to claim.
        batch_size: Max events per batch.
        poll_interval: Seconds between polls when idle.
        max_retries: Attempts before a delivery is dead-lettered.
        claim_timeout: Seconds before a claim is considered stale.
    """

    name: str
    event_types: tuple[type["Event"], ...]
    batch_size: int = 1
    poll_interval: float = 0.5
    max_retries: int = 3
    claim_timeout: float = 300.0

    def __post_init__(self) -> None:
        if not self.event_types:
            raise ValueError("event_types must not be empty")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.claim_timeout <= 0:
            raise ValueError("claim_timeout must be > 0")


class WorkerStatus(Enum):
    IDLE = "idle"
    CLAIMING = "claiming"
    PROCESSING = "processing"
    STOPPING = "stopping"


@dataclass
class WorkerState:
    """Runtime state for a running worker (not persisted)."""

    config: WorkerConfig
    status: WorkerStatus = WorkerStatus.IDLE
    current_batch: list["Event"] = field(default_factory=list)
    last_claim_at: datetime | None = None
    processed_count: int = 0
    failed_count: int = 0
    error: Exception | None = None


@dataclass(frozen=True)
class ClaimResult:
    """Events claimed for one consumer group, with the claim timestamp."""

    events: list["Event"]
    claimed_at: datetime

    def __bool__(self) -> bool:
        return len(self.events) > 0

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator["Event"]:
        return iter(self.events)


# --- EventHandler ---


def _extract_event_type(cls: type) -> type["Event"] | None:
    """Extract the event type E from EventHandler[E] in class bases."""
    for base in getattr(cls, "__orig_bases__", []):
        origin = get_origin(base)
        if origin is not None and getattr(origin, "__name__", None) == "EventHandler":
            args = get_args(base)
            if args and isinstance(args[0], type) and issubclass(args[0], Event):
                return args[0]
    return None


@dataclass_transform()
class _EventHandlerMeta(ABCMeta):
    """Metaclass that applies @dataclass and extracts __event_type__ from EventHandler[E]."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]) -> type:
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)
            event_type = _extract_event_type(cls)
            if event_type is not None:
                cls.__event_type__ = event_type
        return cls


class EventHandler(Generic[E], metaclass=_EventHandlerMeta):
    """Base class for pull-based event handlers.

    Workers claim deliveries from the outbox and delegate to handlers.
    Subclasses are dataclasses whose fields are resolved from the DI
    container; the handled event type comes from the generic parameter.

    Configuration is via class variables:
        __batch_size__: Max events to claim at once (default: 1)
        __poll_interval__: Seconds between polls when idle (default: 0.5)
        __max_retries__: Attempts before the delivery is dead-lettered (default: 3)
        __claim_timeout__: Seconds before a claim is considered stale (default: 300.0)

    Example:
        class ReconcileCompany(EventHandler[CompanyChanged]):
            synchronizer: LifecycleSynchronizer
            companies: CompanyRepository

            async def handle(self, event: CompanyChanged) -> None:
                company = await self.companies.get(event.company_id)
                if company is not None:
                    await self.synchronizer.reconcile_one(company)
    """

    __event_type__: ClassVar[type[Event]]
    __batch_size__: ClassVar[int] = 1
    __poll_interval__: ClassVar[float] = 0.5
    __max_retries__: ClassVar[int] = 3
    __claim_timeout__: ClassVar[float] = 300.0

    async def handle(self, event: E) -> None:
        """Handle a single event. Override for single-event processing."""
        raise NotImplementedError(
            f"{type(self).__name__} must implement handle() or handle_batch()"
        )

    async def handle_batch(self, events: list[E]) -> None:
        """Handle a batch of events. Defaults to calling handle() per event."""
        for event in events:
            await self.handle(event)


# --- Schedule ---


@dataclass
class Schedule(ABC):
    """Base class for scheduled tasks.

    Subclasses are dataclasses with DI-injected dependencies.
    The cron expression is provided via config, not on the class.
    """

    @abstractmethod
    async def run(self, **params: Any) -> None:
        """Run the scheduled task with parameters from config."""
        ...
