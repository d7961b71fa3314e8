"""reservas: venues, class_sessions, memberships, bookings, attendance_logs, notifications

Revision ID: 20261019_reservation_core
Revises:
Create Date: 2026-10-19 09:00:00
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "20261019_reservation_core"
down_revision: Union[str, Sequence[str], None] = None
branch_labels = None
depends_on = None

plan_type = sa.Enum("MONTHLY", "ANNUAL", "CLASS_PACK_10", "CORPORATE", name="plantype")
booking_status = sa.Enum("CONFIRMED", "WAITLISTED", "CANCELLED", "CHECKED_IN", name="bookingstatus")
checkin_outcome = sa.Enum(
    "SUCCESS", "INVALID_WINDOW", "LOCATION_MISMATCH", "STAFF_OVERRIDE", "NOT_FOUND", name="checkinoutcome"
)


def upgrade() -> None:
    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("name", sa.String(160), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_venues"),
    )

    op.create_table(
        "class_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("venue_id", sa.Integer(), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("enrolled_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_class_sessions"),
        sa.ForeignKeyConstraint(["venue_id"], ["venues.id"], name="fk_class_sessions_venue_id_venues"),
        sa.CheckConstraint("capacity > 0", name="ck_class_sessions_capacity_positive"),
        sa.CheckConstraint("enrolled_count >= 0", name="ck_class_sessions_enrolled_non_negative"),
        sa.CheckConstraint("enrolled_count <= capacity", name="ck_class_sessions_enrolled_within_capacity"),
    )
    op.create_index("ix_class_sessions_start_at", "class_sessions", ["start_at"])

    op.create_table(
        "memberships",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("plan_type", plan_type, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("credits_remaining", sa.Integer(), nullable=True),
        sa.Column("last_plan_change", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_memberships"),
        sa.CheckConstraint(
            "credits_remaining IS NULL OR credits_remaining >= 0", name="ck_memberships_credits_non_negative"
        ),
    )
    op.create_index("ix_memberships_member_id", "memberships", ["member_id"])
    # um plano ativo por membro
    op.create_index(
        "uq_memberships_active_member", "memberships", ["member_id"], unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("status", booking_status, nullable=False),
        sa.Column("booked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("qr_code", sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_bookings"),
        sa.ForeignKeyConstraint(["session_id"], ["class_sessions.id"], name="fk_bookings_session_id_class_sessions"),
        sa.UniqueConstraint("member_id", "session_id", name="uq_booking_member_session"),
    )
    op.create_index("ix_bookings_member_id", "bookings", ["member_id"])
    op.create_index("ix_bookings_session_id", "bookings", ["session_id"])
    op.create_index("ix_bookings_qr_code", "bookings", ["qr_code"], unique=True)

    op.create_table(
        "attendance_logs",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("outcome", checkin_outcome, nullable=False),
        sa.Column("booking_id", sa.Integer(), nullable=True),
        sa.Column("session_id", sa.Integer(), nullable=True),
        sa.Column("venue_id", sa.Integer(), nullable=True),
        sa.Column("member_id", sa.Integer(), nullable=True),
        sa.Column("staff_id", sa.Integer(), nullable=True),
        sa.Column("reference", sa.String(64), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("distance_m", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_attendance_logs"),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], name="fk_attendance_logs_booking_id_bookings"),
        sa.ForeignKeyConstraint(["session_id"], ["class_sessions.id"], name="fk_attendance_logs_session_id_class_sessions"),
        sa.ForeignKeyConstraint(["venue_id"], ["venues.id"], name="fk_attendance_logs_venue_id_venues"),
    )
    op.create_index("ix_attendance_logs_booking_id", "attendance_logs", ["booking_id"])
    op.create_index("ix_attendance_logs_session_id", "attendance_logs", ["session_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(40), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(["session_id"], ["class_sessions.id"], name="fk_notifications_session_id_class_sessions"),
    )
    op.create_index("ix_notifications_member_id", "notifications", ["member_id"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("attendance_logs")
    op.drop_table("bookings")
    op.drop_table("memberships")
    op.drop_table("class_sessions")
    op.drop_table("venues")
    bind = op.get_bind()
    for enum in (checkin_outcome, booking_status, plan_type):
        enum.drop(bind, checkfirst=True)
