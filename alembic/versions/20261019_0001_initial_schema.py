"""Initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_col() -> sa.Column:
    return sa.Column("id", sa.String(length=64), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "booking_slots",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.CheckConstraint("duration_minutes > 0", name="ck_booking_slots_duration_positive"),
    )
    op.create_index("ix_booking_slots_start_at", "booking_slots", ["start_at"])

    op.create_table(
        "weekly_availability",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slot_duration_minutes", sa.Integer(), nullable=False),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_weekly_availability_day_of_week"),
        sa.CheckConstraint("end_time > start_time", name="ck_weekly_availability_time_range"),
        sa.CheckConstraint(
            "slot_duration_minutes > 0",
            name="ck_weekly_availability_slot_duration_positive",
        ),
    )
    op.create_index("ix_weekly_availability_day_of_week", "weekly_availability", ["day_of_week"])

    op.create_table(
        "bookings",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column(
            "slot_id",
            sa.String(length=64),
            sa.ForeignKey("booking_slots.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("client_email", sa.String(length=255), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("source", sa.String(length=64), nullable=False),
        sa.UniqueConstraint("slot_id", name="uq_bookings_slot_id"),
    )
    op.create_index("ix_bookings_client_email", "bookings", ["client_email"])


def downgrade() -> None:
    op.drop_index("ix_bookings_client_email", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_weekly_availability_day_of_week", table_name="weekly_availability")
    op.drop_table("weekly_availability")
    op.drop_index("ix_booking_slots_start_at", table_name="booking_slots")
    op.drop_table("booking_slots")
