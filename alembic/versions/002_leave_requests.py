"""Add leave requests

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 00:00:00.000000

Changes:
  New tables:
    leave_requests   : a guardian's (or teacher's) request to excuse a student
                       for a date range, settled by the class teacher or staff

  Altered tables:
    notifications    : notification_type gains "leave_request"
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MYSQL_OPTS = {"mysql_charset": "utf8mb4", "mysql_collate": "utf8mb4_unicode_ci"}

OLD_NOTIFICATION_TYPES = ("approval", "rejection", "alert", "announcement", "message", "generic")
NEW_NOTIFICATION_TYPES = (
    "approval",
    "rejection",
    "alert",
    "announcement",
    "message",
    "leave_request",
    "generic",
)


def upgrade() -> None:
    op.create_table(
        "leave_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("class_division_id", sa.Integer(), nullable=True),
        sa.Column("requested_by", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "approved", "rejected"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("reviewed_by", sa.Integer(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students_master.id"]),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["requested_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_leave_requests_student_id", "leave_requests", ["student_id"])
    op.create_index(
        "ix_leave_requests_class_division_id", "leave_requests", ["class_division_id"]
    )
    op.create_index("ix_leave_requests_requested_by", "leave_requests", ["requested_by"])

    op.alter_column(
        "notifications",
        "notification_type",
        existing_type=sa.Enum(*OLD_NOTIFICATION_TYPES),
        type_=sa.Enum(*NEW_NOTIFICATION_TYPES),
        existing_nullable=False,
        existing_server_default="generic",
    )


def downgrade() -> None:
    op.execute(
        "UPDATE notifications SET notification_type = 'generic' "
        "WHERE notification_type = 'leave_request'"
    )
    op.alter_column(
        "notifications",
        "notification_type",
        existing_type=sa.Enum(*NEW_NOTIFICATION_TYPES),
        type_=sa.Enum(*OLD_NOTIFICATION_TYPES),
        existing_nullable=False,
        existing_server_default="generic",
    )
    op.drop_index("ix_leave_requests_requested_by", table_name="leave_requests")
    op.drop_index("ix_leave_requests_class_division_id", table_name="leave_requests")
    op.drop_index("ix_leave_requests_student_id", table_name="leave_requests")
    op.drop_table("leave_requests")
