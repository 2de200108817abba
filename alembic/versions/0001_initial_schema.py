"""Initial hotel inventory schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-01-06 09:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "hotel"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "rooms",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("room_number", sa.String(16), nullable=False),
        sa.Column("type", sa.String(8), nullable=False),
        sa.Column("capacity", sa.Integer(), server_default="2", nullable=False),
        sa.Column("status", sa.String(12), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("room_number", name="uq_rooms_room_number"),
        schema=SCHEMA,
    )
    op.create_index("ix_hotel_rooms_room_number", "rooms", ["room_number"], schema=SCHEMA)

    op.create_table(
        "guests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("id_proof_type", sa.String(50), nullable=True),
        sa.Column("id_proof_number", sa.String(100), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        schema=SCHEMA,
    )
    op.create_index("ix_hotel_guests_email", "guests", ["email"], schema=SCHEMA)

    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_reference", sa.String(32), nullable=False),
        sa.Column(
            "room_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{SCHEMA}.rooms.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "guest_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{SCHEMA}.guests.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), server_default="1", nullable=False),
        sa.Column("special_requests", sa.String(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("payment_method", sa.String(6), nullable=True),
        sa.Column("status", sa.String(11), nullable=False),
        sa.Column("pms_booking_id", sa.String(100), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("booking_reference", name="uq_bookings_booking_reference"),
        sa.UniqueConstraint("pms_booking_id", name="uq_bookings_pms_booking_id"),
        sa.CheckConstraint("check_in < check_out", name="ck_bookings_date_order"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_bookings_room_dates", "bookings", ["room_id", "check_in", "check_out"], schema=SCHEMA
    )
    op.create_index("ix_hotel_bookings_guest_id", "bookings", ["guest_id"], schema=SCHEMA)

    op.create_table(
        "booking_addons",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{SCHEMA}.bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("addon_type", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("quantity", sa.Integer(), server_default="1", nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_hotel_booking_addons_booking_id", "booking_addons", ["booking_id"], schema=SCHEMA
    )

    op.create_table(
        "room_blocks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "room_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{SCHEMA}.rooms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("start_date < end_date", name="ck_room_blocks_date_order"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_room_blocks_room_dates",
        "room_blocks",
        ["room_id", "start_date", "end_date"],
        schema=SCHEMA,
    )

    op.create_table(
        "sync_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("action", sa.String(14), nullable=False),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("outcome", sa.String(7), nullable=False),
        sa.Column(
            "booking_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{SCHEMA}.bookings.id"),
            nullable=True,
        ),
        sa.Column("payload", postgresql.JSONB(), server_default="{}", nullable=False),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        schema=SCHEMA,
    )
    op.create_index("ix_hotel_sync_logs_action", "sync_logs", ["action"], schema=SCHEMA)
    op.create_index("ix_hotel_sync_logs_booking_id", "sync_logs", ["booking_id"], schema=SCHEMA)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("sync_logs", schema=SCHEMA)
    op.drop_table("room_blocks", schema=SCHEMA)
    op.drop_table("booking_addons", schema=SCHEMA)
    op.drop_table("bookings", schema=SCHEMA)
    op.drop_table("guests", schema=SCHEMA)
    op.drop_table("rooms", schema=SCHEMA)
