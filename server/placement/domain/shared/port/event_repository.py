"""EventRepository port - persistence for the event log and its deliveries."""

from typing import Protocol, TypeVar

from placement.domain.shared.event import ClaimResult, Event, EventId

E = TypeVar("E", bound=Event)


class EventRepository(Protocol):
    """Append-only event log plus one delivery row per (event, consumer_group)."""

    async def save_with_deliveries(self, event: Event, consumer_groups: set[str]) -> None:
        """Save event to the log and create delivery rows.

        With no consumer groups the event is stored audit-only.
        """
        ...

    async def get(self, event_id: EventId) -> Event | None: ...

    async def find_latest_by_type(self, event_type: type[E]) -> E | None: ...

    async def list_events(
        self,
        limit: int = 50,
        event_types: list[str] | None = None,
        newest_first: bool = True,
    ) -> list[Event]: ...

    async def list_pending(self, event_type: type[E]) -> list[E]:
        """Events of this type with at least one delivery still waiting to be claimed."""
        ...

    async def claim_delivery(
        self,
        consumer_group: str,
        event_types: list[str],
        limit: int = 1,
    ) -> ClaimResult:
        """Claim pending deliveries for a consumer group.

        Deliveries that failed before are only eligible once their backoff
        (min(30, 5^retry_count) seconds since the last attempt) has elapsed.
        """
        ...

    async def mark_delivery_status(
        self,
        delivery_id: str,
        status: str,
        error: str | None = None,
    ) -> None: ...

    async def reset_stale_deliveries(self, timeout_seconds: float) -> int:
        """Return claimed-but-abandoned deliveries to pending. Returns the count reset."""
        ...

    async def mark_failed_with_retry(
        self,
        delivery_id: str,
        error: str,
        max_retries: int,
    ) -> bool:
        """Record a failed attempt.

        Returns True when the delivery is dead-lettered (status 'failed'),
        False when it was put back to pending for another attempt.
        """
        ...

    async def count_deliveries(self, status: str, consumer_group: str | None = None) -> int: ...
