"""Outbox - domain service for reliable event delivery."""

from typing import TypeVar

from placement.domain.shared.event import ClaimResult, Event
from placement.domain.shared.model.subscription_registry import SubscriptionRegistry
from placement.domain.shared.port.event_repository import EventRepository
from placement.domain.shared.service import Service

E = TypeVar("E", bound=Event)


class Outbox(Service):
    """Transactional outbox.

    Events are appended in the same unit of work as the state change that
    produced them. On append, one delivery row is created per consumer group
    subscribed to the event type; events nobody subscribes to (audit trail)
    are stored without deliveries.
    """

    _repo: EventRepository
    _registry: SubscriptionRegistry

    async def append(self, event: Event) -> None:
        consumer_groups = self._registry.get(type(event).__name__, set())
        await self._repo.save_with_deliveries(event, consumer_groups=consumer_groups)

    async def claim(
        self,
        event_types: list[type[Event]],
        limit: int,
        consumer_group: str,
    ) -> ClaimResult:
        """Claim pending deliveries for one consumer group.

        Args:
            event_types: Event classes to claim.
            limit: Maximum number of deliveries to claim.
            consumer_group: The handler class name claiming deliveries.
        """
        return await self._repo.claim_delivery(
            consumer_group=consumer_group,
            event_types=[et.__name__ for et in event_types],
            limit=limit,
        )

    async def mark_delivered(self, delivery_id: str) -> None:
        await self._repo.mark_delivery_status(delivery_id, status="delivered")

    async def mark_failed(self, delivery_id: str, error: str) -> None:
        await self._repo.mark_delivery_status(delivery_id, status="failed", error=error)

    async def mark_failed_with_retry(self, delivery_id: str, error: str, max_retries: int) -> bool:
        """Record a failed attempt; returns True once the delivery is dead-lettered."""
        return await self._repo.mark_failed_with_retry(
            delivery_id, error=error, max_retries=max_retries
        )

    async def reset_stale_claims(self, timeout_seconds: float) -> int:
        """Reset deliveries claimed longer than timeout_seconds ago (crashed workers)."""
        return await self._repo.reset_stale_deliveries(timeout_seconds)

    async def pending(self, event_type: type[E]) -> list[E]:
        """Appended events of this type not yet picked up by a worker.

        Claimed deliveries do not count: their handler may already have
        read the state a new event would be about.
        """
        return await self._repo.list_pending(event_type)

    async def find_latest(self, event_type: type[E]) -> E | None:
        return await self._repo.find_latest_by_type(event_type)

    async def dead_letter_count(self, consumer_group: str | None = None) -> int:
        return await self._repo.count_deliveries("failed", consumer_group=consumer_group)
