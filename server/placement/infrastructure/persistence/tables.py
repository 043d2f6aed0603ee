"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.engine import Dialect
from sqlalchemy.types import JSON, TypeDecorator


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone-aware UTC datetimes on every dialect.

    SQLite drops tzinfo on the way back; values are stored as UTC and
    re-tagged when read.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


metadata = MetaData()

# ============================================================================
# RECORDS TABLE (primary store: active companies, students, admins, ...)
# ============================================================================
records_table = Table(
    "records",
    metadata,
    Column("kind", String(32), primary_key=True),
    Column("id", String, primary_key=True),
    Column("payload", JSON, nullable=False),
    Column("version", Integer, nullable=False, server_default=text("1")),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=False),
)


# ============================================================================
# ARCHIVED RECORDS TABLE (one logical collection per kind)
# ============================================================================
archived_records_table = Table(
    "archived_records",
    metadata,
    Column("kind", String(32), primary_key=True),
    Column("id", String, primary_key=True),
    Column("snapshot", JSON, nullable=False),
    Column("deleted_at", UTCDateTime, nullable=False),
    Column("deleted_by_role", String(64), nullable=False),
)

Index(
    "idx_archived_records_kind_deleted",
    archived_records_table.c.kind,
    archived_records_table.c.deleted_at.desc(),
)


# ============================================================================
# MIRROR PROJECTIONS TABLE (database-backed mirror store)
# ============================================================================
mirror_projections_table = Table(
    "mirror_projections",
    metadata,
    Column("company_id", String, primary_key=True),
    Column("payload", JSON, nullable=False),
    Column("synced_at", UTCDateTime, nullable=False),
)


# ============================================================================
# EVENTS TABLE (append-only event log)
# ============================================================================
events_table = Table(
    "events",
    metadata,
    Column("id", String, primary_key=True),
    Column("event_type", String(128), nullable=False),
    Column("payload", JSON, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
)

Index(
    "idx_events_type_created",
    events_table.c.event_type,
    events_table.c.created_at.desc(),
)


# ============================================================================
# DELIVERIES TABLE (per-consumer-group tracking)
# ============================================================================
deliveries_table = Table(
    "deliveries",
    metadata,
    Column("id", String, primary_key=True),
    Column("event_id", String, ForeignKey("events.id"), nullable=False),
    Column("consumer_group", String(128), nullable=False),
    Column("status", String(32), nullable=False, server_default=text("'pending'")),
    Column("retry_count", Integer, nullable=False, server_default=text("0")),
    Column("claimed_at", UTCDateTime, nullable=True),
    Column("delivered_at", UTCDateTime, nullable=True),
    Column("delivery_error", Text, nullable=True),
    Column("updated_at", UTCDateTime, nullable=False),
)

Index(
    "idx_deliveries_group_status",
    deliveries_table.c.consumer_group,
    deliveries_table.c.status,
)
