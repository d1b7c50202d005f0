"""Access schema — users, event_requests, events, visitors (the subset this service touches).

Revision ID: 001_access_schema
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_access_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(320), nullable=False, unique=True),
        sa.Column("password", sa.String(128), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="organiser"),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("department", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "event_requests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("source_ref", sa.String(200), nullable=False, unique=True),
        sa.Column("organiser_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("department", sa.String(200), nullable=False),
        sa.Column("event_name", sa.String(300), nullable=False),
        sa.Column("event_description", sa.Text, nullable=True),
        sa.Column("date_from", sa.Date, nullable=False),
        sa.Column("date_to", sa.Date, nullable=False),
        sa.Column("expected_students", sa.Integer, nullable=False),
        sa.Column("max_capacity", sa.Integer, nullable=False),
        sa.Column("source", sa.String(20), nullable=False, server_default="events"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_event_requests_status",
        ),
    )

    op.create_table(
        "events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("event_request_id", UUID(as_uuid=True), sa.ForeignKey("event_requests.id"), nullable=False, unique=True),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("date_from", sa.Date, nullable=False),
        sa.Column("date_to", sa.Date, nullable=False),
        sa.Column("max_capacity", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "visitors",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("event_id", UUID(as_uuid=True), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("register_number", sa.String(64), nullable=True),
        sa.Column("event_name", sa.String(300), nullable=False),
        sa.Column("date_of_visit_from", sa.Date, nullable=False),
        sa.Column("date_of_visit_to", sa.Date, nullable=False),
        sa.Column("visitor_category", sa.String(20), nullable=False, server_default="student"),
        sa.Column("purpose", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="approved"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_visitors_event_id", "visitors", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_visitors_event_id", table_name="visitors")
    op.drop_table("visitors")
    op.drop_table("events")
    op.drop_table("event_requests")
    op.drop_table("users")
