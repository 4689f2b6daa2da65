"""Initial DormGuard schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rooms",
        sa.Column("room_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("room_number", sa.String(length=20), nullable=False),
        sa.Column("building", sa.String(length=100), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("current_occupants", sa.Integer(), server_default="0", nullable=False),
        sa.CheckConstraint("capacity > 0", name="ck_rooms_capacity_positive"),
        sa.CheckConstraint(
            "current_occupants >= 0 AND current_occupants <= capacity",
            name="ck_rooms_occupancy_within_capacity",
        ),
        sa.PrimaryKeyConstraint("room_id"),
        sa.UniqueConstraint("room_number"),
    )
    op.create_index(op.f("ix_rooms_room_id"), "rooms", ["room_id"], unique=False)

    op.create_table(
        "admins",
        sa.Column("admin_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("contact_number", sa.String(length=30), nullable=True),
        sa.Column("employed_date", sa.Date(), server_default=sa.func.current_date(), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("admin_id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_admins_admin_id"), "admins", ["admin_id"], unique=False)
    op.create_index(op.f("ix_admins_username"), "admins", ["username"], unique=True)

    op.create_table(
        "tenants",
        sa.Column("tenant_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("room_id", sa.Integer(), nullable=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("contact_number", sa.String(length=30), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("emergency_contact_name", sa.String(length=100), nullable=True),
        sa.Column("emergency_contact_number", sa.String(length=30), nullable=True),
        sa.Column("move_in_date", sa.Date(), server_default=sa.func.current_date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.room_id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("tenant_id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_tenants_tenant_id"), "tenants", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_tenants_room_id"), "tenants", ["room_id"], unique=False)
    op.create_index(op.f("ix_tenants_username"), "tenants", ["username"], unique=True)

    op.create_table(
        "visitors",
        sa.Column("visitor_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("contact_number", sa.String(length=30), nullable=True),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("expected_date", sa.Date(), nullable=False),
        sa.Column("expected_time", sa.Time(), nullable=True),
        sa.Column("approval_status", sa.String(length=20), nullable=False),
        sa.Column("denial_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.tenant_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("visitor_id"),
    )
    op.create_index(op.f("ix_visitors_visitor_id"), "visitors", ["visitor_id"], unique=False)
    op.create_index(op.f("ix_visitors_tenant_id"), "visitors", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_visitors_approval_status"), "visitors", ["approval_status"], unique=False)

    op.create_table(
        "visitor_logs",
        sa.Column("log_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("visitor_id", sa.Integer(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(), nullable=True),
        sa.Column("check_out_time", sa.DateTime(), nullable=True),
        sa.Column("processed_by", sa.Integer(), nullable=True),
        sa.Column("id_left", sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(["processed_by"], ["admins.admin_id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["visitor_id"], ["visitors.visitor_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("log_id"),
    )
    op.create_index(op.f("ix_visitor_logs_log_id"), "visitor_logs", ["log_id"], unique=False)
    op.create_index(op.f("ix_visitor_logs_visitor_id"), "visitor_logs", ["visitor_id"], unique=False)
    op.create_index("ix_visitor_logs_open_sessions", "visitor_logs", ["visitor_id", "check_out_time"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_visitor_logs_open_sessions", table_name="visitor_logs")
    op.drop_index(op.f("ix_visitor_logs_visitor_id"), table_name="visitor_logs")
    op.drop_index(op.f("ix_visitor_logs_log_id"), table_name="visitor_logs")
    op.drop_table("visitor_logs")

    op.drop_index(op.f("ix_visitors_approval_status"), table_name="visitors")
    op.drop_index(op.f("ix_visitors_tenant_id"), table_name="visitors")
    op.drop_index(op.f("ix_visitors_visitor_id"), table_name="visitors")
    op.drop_table("visitors")

    op.drop_index(op.f("ix_tenants_username"), table_name="tenants")
    op.drop_index(op.f("ix_tenants_room_id"), table_name="tenants")
    op.drop_index(op.f("ix_tenants_tenant_id"), table_name="tenants")
    op.drop_table("tenants")

    op.drop_index(op.f("ix_admins_username"), table_name="admins")
    op.drop_index(op.f("ix_admins_admin_id"), table_name="admins")
    op.drop_table("admins")

    op.drop_index(op.f("ix_rooms_room_id"), table_name="rooms")
    op.drop_table("rooms")
