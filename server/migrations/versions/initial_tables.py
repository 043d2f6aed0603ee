"""initial_tables

Primary records, archived records, database-backed mirror projections,
and the outbox (append-only events plus per-consumer-group deliveries).

Revision ID: initial_tables
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "initial_tables"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "records",
        sa.Column("kind", sa.String(32), primary_key=True),
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "archived_records",
        sa.Column("kind", sa.String(32), primary_key=True),
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_by_role", sa.String(64), nullable=False),
    )
    op.create_index(
        "idx_archived_records_kind_deleted",
        "archived_records",
        ["kind", sa.text("deleted_at DESC")],
    )

    op.create_table(
        "mirror_projections",
        sa.Column("company_id", sa.String(), primary_key=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("synced_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_type", sa.String(128), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_events_type_created",
        "events",
        ["event_type", sa.text("created_at DESC")],
    )

    op.create_table(
        "deliveries",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("consumer_group", sa.String(128), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivery_error", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_deliveries_group_status",
        "deliveries",
        ["consumer_group", "status"],
    )


def downgrade() -> None:
    op.drop_index("idx_deliveries_group_status", table_name="deliveries")
    op.drop_table("deliveries")
    op.drop_index("idx_events_type_created", table_name="events")
    op.drop_table("events")
    op.drop_table("mirror_projections")
    op.drop_index("idx_archived_records_kind_deleted", table_name="archived_records")
    op.drop_table("archived_records")
    op.drop_table("records")
