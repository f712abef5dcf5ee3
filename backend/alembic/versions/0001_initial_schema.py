"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates the tables behind the events subsystem of the onboarding portal:
users, events, event_participants.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EVENT_TYPES = ("company_event", "training", "team_meeting", "1on1")
PARTICIPANT_STATUSES = ("pending", "accepted", "declined", "maybe")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False, server_default=""),
        sa.Column("profile_image", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("event_type", sa.Enum(*EVENT_TYPES, name="event_type"), nullable=False,
                  server_default="company_event"),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("meeting_link", sa.String(1000), nullable=True),
        sa.Column("is_mandatory", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("max_participants", sa.Integer, nullable=True),
        sa.Column("recording_url", sa.String(1000), nullable=True),
        sa.Column("recording_thumbnail_url", sa.String(1000), nullable=True),
        sa.Column("recording_duration_seconds", sa.Integer, nullable=True),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("end_time > start_time", name="ck_events_end_after_start"),
    )
    op.create_index("ix_events_start_time", "events", ["start_time"])
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])

    # --- event_participants ---
    op.create_table(
        "event_participants",
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"),
                  primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), primary_key=True),
        sa.Column("status", sa.Enum(*PARTICIPANT_STATUSES, name="participant_status"), nullable=False,
                  server_default="pending"),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_event_participants_user_id", "event_participants", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_event_participants_user_id", table_name="event_participants")
    op.drop_table("event_participants")
    op.drop_index("ix_events_organizer_id", table_name="events")
    op.drop_index("ix_events_start_time", table_name="events")
    op.drop_table("events")
    op.drop_table("users")
    sa.Enum(name="participant_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="event_type").drop(op.get_bind(), checkfirst=True)
