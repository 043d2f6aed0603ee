"""SQLAlchemy adapter implementing EventRepository."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar
from uuid import uuid4

from sqlalchemy import and_, func, insert, or_, select, update

from placement.domain.shared.event import ClaimResult, Event, EventId
from placement.domain.shared.port.event_repository import EventRepository
from placement.infrastructure.persistence.session import SerializedSession
from placement.infrastructure.persistence.tables import deliveries_table, events_table

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Event)

MAX_BACKOFF_SECONDS = 30


def _backoff_eligible(now: datetime) -> Any:
    """Deliveries whose backoff of min(30, 5^retry_count) seconds has elapsed.

    Expanded into one clause per distinct backoff step so the condition
    compiles on every dialect.
    """
    clauses = [deliveries_table.c.retry_count == 0]
    retries = 1
    while 5**retries < MAX_BACKOFF_SECONDS:
        clauses.append(
            and_(
                deliveries_table.c.retry_count == retries,
                deliveries_table.c.updated_at <= now - timedelta(seconds=5**retries),
            )
        )
        retries += 1
    clauses.append(
        and_(
            deliveries_table.c.retry_count >= retries,
            deliveries_table.c.updated_at <= now - timedelta(seconds=MAX_BACKOFF_SECONDS),
        )
    )
    return or_(*clauses)


class SQLAlchemyEventRepository(EventRepository):
    """SQLAlchemy-backed event repository.

    Events are stored in an append-only log. Delivery tracking uses a
    separate deliveries table with one row per (event, consumer_group) pair.
    """

    def __init__(self, session: SerializedSession) -> None:
        self._session = session

    async def save_with_deliveries(self, event: Event, consumer_groups: set[str]) -> None:
        now = datetime.now(UTC)
        await self._session.execute(
            insert(events_table).values(
                id=str(event.id),
                event_type=type(event).__name__,
                payload=event.model_dump(mode="json"),
                created_at=now,
            )
        )

        for group in sorted(consumer_groups):
            await self._session.execute(
                insert(deliveries_table).values(
                    id=str(uuid4()),
                    event_id=str(event.id),
                    consumer_group=group,
                    status="pending",
                    retry_count=0,
                    updated_at=now,
                )
            )

    async def get(self, event_id: EventId) -> Event | None:
        stmt = select(events_table.c.event_type, events_table.c.payload).where(
            events_table.c.id == str(event_id)
        )
        result = await self._session.execute(stmt)
        row = result.first()
        if row is None:
            return None

        event_type, payload = row
        return self._deserialize(event_type, payload)

    async def find_latest_by_type(self, event_type: type[E]) -> E | None:
        type_name = event_type.__name__
        stmt = (
            select(events_table.c.payload)
            .where(events_table.c.event_type == type_name)
            .order_by(events_table.c.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.first()
        if row is None:
            return None

        (payload,) = row
        return self._deserialize(type_name, payload)  # type: ignore[return-value]

    async def list_events(
        self,
        limit: int = 50,
        event_types: list[str] | None = None,
        newest_first: bool = True,
    ) -> list[Event]:
        stmt = select(events_table.c.event_type, events_table.c.payload)
        if newest_first:
            stmt = stmt.order_by(events_table.c.created_at.desc())
        else:
            stmt = stmt.order_by(events_table.c.created_at.asc())
        if event_types:
            stmt = stmt.where(events_table.c.event_type.in_(event_types))

        result = await self._session.execute(stmt.limit(limit))
        events: list[Event] = []
        for event_type, payload in result.fetchall():
            event = self._deserialize(event_type, payload)
            if event is not None:
                events.append(event)
        return events

    async def list_pending(self, event_type: type[E]) -> list[E]:
        type_name = event_type.__name__
        waiting = (
            select(deliveries_table.c.event_id)
            .where(deliveries_table.c.status == "pending")
            .distinct()
        )
        stmt = (
            select(events_table.c.payload)
            .where(
                events_table.c.event_type == type_name,
                events_table.c.id.in_(waiting),
            )
            .order_by(events_table.c.created_at.asc())
        )
        result = await self._session.execute(stmt)
        events: list[E] = []
        for (payload,) in result.fetchall():
            event = self._deserialize(type_name, payload)
            if event is not None:
                events.append(event)  # type: ignore[arg-type]
        return events

    async def claim_delivery(
        self,
        consumer_group: str,
        event_types: list[str],
        limit: int = 1,
    ) -> ClaimResult:
        """Claim pending deliveries for a specific consumer group.

        On PostgreSQL the select takes row locks with SKIP LOCKED so
        concurrent workers never claim the same delivery.
        """
        now = datetime.now(UTC)
        stmt = (
            select(
                deliveries_table.c.id,
                events_table.c.event_type,
                events_table.c.payload,
            )
            .join(events_table, deliveries_table.c.event_id == events_table.c.id)
            .where(
                deliveries_table.c.consumer_group == consumer_group,
                deliveries_table.c.status == "pending",
                events_table.c.event_type.in_(event_types),
                _backoff_eligible(now),
            )
            .order_by(events_table.c.created_at.asc())
            .limit(limit)
            .with_for_update(skip_locked=True, of=deliveries_table)
        )
        result = await self._session.execute(stmt)
        rows = result.fetchall()
        if not rows:
            return ClaimResult(events=[], claimed_at=now)

        delivery_ids = [row[0] for row in rows]
        await self._session.execute(
            update(deliveries_table)
            .where(deliveries_table.c.id.in_(delivery_ids))
            .values(status="claimed", claimed_at=now, updated_at=now)
        )

        events: list[Event] = []
        for delivery_id, event_type, payload in rows:
            event = self._deserialize(event_type, payload)
            if event is None:
                # Unreadable payloads can never succeed; park them
                await self.mark_delivery_status(
                    delivery_id, status="failed", error=f"Undecodable event type '{event_type}'"
                )
                continue
            event.attach_delivery(delivery_id)
            events.append(event)

        return ClaimResult(events=events, claimed_at=now)

    async def mark_delivery_status(
        self,
        delivery_id: str,
        status: str,
        error: str | None = None,
    ) -> None:
        now = datetime.now(UTC)
        values: dict[str, Any] = {"status": status, "updated_at": now}
        if status == "delivered":
            values["delivered_at"] = now
        if error is not None:
            values["delivery_error"] = error

        await self._session.execute(
            update(deliveries_table).where(deliveries_table.c.id == delivery_id).values(**values)
        )

    async def reset_stale_deliveries(self, timeout_seconds: float) -> int:
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=timeout_seconds)
        result = await self._session.execute(
            update(deliveries_table)
            .where(
                deliveries_table.c.status == "claimed",
                deliveries_table.c.claimed_at < cutoff,
            )
            .values(status="pending", claimed_at=None, updated_at=now)
        )
        count = result.rowcount
        if count > 0:
            logger.info(f"Reset {count} stale deliveries (older than {timeout_seconds}s)")
        return count

    async def mark_failed_with_retry(
        self,
        delivery_id: str,
        error: str,
        max_retries: int,
    ) -> bool:
        now = datetime.now(UTC)
        result = await self._session.execute(
            select(deliveries_table.c.retry_count).where(deliveries_table.c.id == delivery_id)
        )
        row = result.first()
        if row is None:
            logger.warning(f"Delivery {delivery_id} not found for mark_failed_with_retry")
            return False

        retry_count = (row[0] or 0) + 1
        dead = retry_count >= max_retries
        values: dict[str, Any] = {
            "delivery_error": error,
            "retry_count": retry_count,
            "updated_at": now,
        }
        if dead:
            values["status"] = "failed"
        else:
            values["status"] = "pending"
            values["claimed_at"] = None

        await self._session.execute(
            update(deliveries_table).where(deliveries_table.c.id == delivery_id).values(**values)
        )
        return dead

    async def count_deliveries(self, status: str, consumer_group: str | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(deliveries_table)
            .where(deliveries_table.c.status == status)
        )
        if consumer_group is not None:
            stmt = stmt.where(deliveries_table.c.consumer_group == consumer_group)
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    def _deserialize(self, event_type: str, payload: dict | str) -> Event | None:
        event_cls = Event._registry.get(event_type)
        if event_cls is None:
            logger.warning(f"Unknown event type '{event_type}' - skipping")
            return None

        try:
            if isinstance(payload, str):
                return event_cls.model_validate_json(payload)
            return event_cls.model_validate(payload)
        except Exception as e:
            logger.error(f"Failed to deserialize event type '{event_type}': {e}")
            return None
