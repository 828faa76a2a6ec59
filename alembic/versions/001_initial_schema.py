"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Uniqueness that must survive concurrent writers is enforced here, not in the
application: one primary guardian per student (primary_student_id), one ongoing
enrollment per student (ongoing_student_id), one roll number per class, one
attendance row per student per day, one participant row per student per activity.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE = ("admin", "principal", "teacher", "parent")
APPROVAL = ("draft", "pending", "approved", "rejected", "sent")
VISIBILITY = ("school_wide", "class_specific", "teacher_specific", "direct")

MYSQL_OPTS = {"mysql_charset": "utf8mb4", "mysql_collate": "utf8mb4_unicode_ci"}


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("role", sa.Enum(*ROLE), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("phone_number"),
        **MYSQL_OPTS,
    )

    # Class divisions (teacher_id is the legacy single class teacher)
    op.create_table(
        "class_divisions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("level", sa.String(50), nullable=False),
        sa.Column("division", sa.String(10), nullable=False),
        sa.Column("academic_year", sa.String(20), nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("level", "division", "academic_year", name="uq_class_division"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_class_divisions_teacher_id", "class_divisions", ["teacher_id"])

    # Teacher ↔ class assignments
    op.create_table(
        "class_teacher_assignments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("class_division_id", sa.Integer(), nullable=False),
        sa.Column(
            "assignment_type",
            sa.Enum("class_teacher", "subject_teacher"),
            nullable=False,
            server_default="class_teacher",
        ),
        sa.Column("subject", sa.String(100), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "teacher_id",
            "class_division_id",
            "assignment_type",
            "subject",
            name="uq_teacher_assignment",
        ),
        **MYSQL_OPTS,
    )
    op.create_index(
        "ix_class_teacher_assignments_teacher_id", "class_teacher_assignments", ["teacher_id"]
    )
    op.create_index(
        "ix_class_teacher_assignments_class_division_id",
        "class_teacher_assignments",
        ["class_division_id"],
    )

    # Students and their enrollments
    op.create_table(
        "students_master",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("admission_number", sa.String(50), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("admission_number"),
        **MYSQL_OPTS,
    )

    op.create_table(
        "student_academic_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("class_division_id", sa.Integer(), nullable=False),
        sa.Column("roll_number", sa.String(20), nullable=False),
        sa.Column(
            "status",
            sa.Enum("ongoing", "transferred", "graduated"),
            nullable=False,
            server_default="ongoing",
        ),
        sa.Column("ongoing_student_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students_master.id"]),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("class_division_id", "roll_number", name="uq_enrollment_roll_number"),
        sa.UniqueConstraint("ongoing_student_id"),
        **MYSQL_OPTS,
    )
    op.create_index(
        "ix_student_academic_records_student_id", "student_academic_records", ["student_id"]
    )
    op.create_index(
        "ix_student_academic_records_class_division_id",
        "student_academic_records",
        ["class_division_id"],
    )

    # Guardians
    op.create_table(
        "parent_student_mappings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("relationship", sa.Enum("father", "mother", "guardian"), nullable=False),
        sa.Column("is_primary_guardian", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column(
            "access_level",
            sa.Enum("full", "restricted", "view_only"),
            nullable=False,
            server_default="full",
        ),
        sa.Column("primary_student_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["parent_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["student_id"], ["students_master.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("parent_id", "student_id", name="uq_parent_student"),
        sa.UniqueConstraint("primary_student_id"),
        **MYSQL_OPTS,
    )
    op.create_index(
        "ix_parent_student_mappings_parent_id", "parent_student_mappings", ["parent_id"]
    )
    op.create_index(
        "ix_parent_student_mappings_student_id", "parent_student_mappings", ["student_id"]
    )

    # Homework
    op.create_table(
        "homework",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("class_division_id", sa.Integer(), nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_homework_class_division_id", "homework", ["class_division_id"])
    op.create_index("ix_homework_teacher_id", "homework", ["teacher_id"])

    # Activities and participants
    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("activity_date", sa.Date(), nullable=False),
        sa.Column(
            "activity_type",
            sa.Enum("field_trip", "sports", "cultural", "academic", "other"),
            nullable=False,
        ),
        sa.Column("class_division_id", sa.Integer(), nullable=True),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("venue", sa.String(200), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("scheduled", "in_progress", "completed", "cancelled"),
            nullable=False,
            server_default="scheduled",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_activities_class_division_id", "activities", ["class_division_id"])
    op.create_index("ix_activities_teacher_id", "activities", ["teacher_id"])

    op.create_table(
        "activity_participants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("activity_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("parent_consent", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("consent_given_by", sa.Integer(), nullable=True),
        sa.Column("consent_given_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["activity_id"], ["activities.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students_master.id"]),
        sa.ForeignKeyConstraint(["consent_given_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("activity_id", "student_id", name="uq_activity_participant"),
        **MYSQL_OPTS,
    )
    op.create_index(
        "ix_activity_participants_activity_id", "activity_participants", ["activity_id"]
    )
    op.create_index(
        "ix_activity_participants_student_id", "activity_participants", ["student_id"]
    )

    # Alerts
    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("alert_type", sa.Enum("urgent", "important", "general"), nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("class_division_id", sa.Integer(), nullable=True),
        sa.Column(
            "visibility_scope", sa.Enum(*VISIBILITY), nullable=False, server_default="school_wide"
        ),
        sa.Column("audience_role", sa.Enum(*ROLE), nullable=True),
        sa.Column("status", sa.Enum(*APPROVAL), nullable=False, server_default="draft"),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejected_by", sa.Integer(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["rejected_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_alerts_sender_id", "alerts", ["sender_id"])
    op.create_index("ix_alerts_class_division_id", "alerts", ["class_division_id"])
    op.create_index("ix_alerts_status", "alerts", ["status"])

    # Announcements
    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "announcement_type",
            sa.Enum("circular", "general", "urgent", "academic", "administrative"),
            nullable=False,
        ),
        sa.Column(
            "priority",
            sa.Enum("low", "normal", "high", "urgent"),
            nullable=False,
            server_default="normal",
        ),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("class_division_id", sa.Integer(), nullable=True),
        sa.Column(
            "visibility_scope", sa.Enum(*VISIBILITY), nullable=False, server_default="school_wide"
        ),
        sa.Column("audience_role", sa.Enum(*ROLE), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("status", sa.Enum(*APPROVAL), nullable=False, server_default="pending"),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejected_by", sa.Integer(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["rejected_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_announcements_created_by", "announcements", ["created_by"])
    op.create_index("ix_announcements_class_division_id", "announcements", ["class_division_id"])
    op.create_index("ix_announcements_status", "announcements", ["status"])

    # Calendar events (event_type is the visibility scope)
    op.create_table(
        "calendar_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("event_date", sa.DateTime(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column(
            "event_type", sa.Enum(*VISIBILITY), nullable=False, server_default="school_wide"
        ),
        sa.Column(
            "event_category",
            sa.Enum(
                "general", "academic", "sports", "cultural", "holiday", "exam", "meeting", "other"
            ),
            nullable=False,
            server_default="general",
        ),
        sa.Column("class_division_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum(*APPROVAL), nullable=False, server_default="pending"),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_calendar_events_event_date", "calendar_events", ["event_date"])
    op.create_index(
        "ix_calendar_events_class_division_id", "calendar_events", ["class_division_id"]
    )
    op.create_index("ix_calendar_events_created_by", "calendar_events", ["created_by"])
    op.create_index("ix_calendar_events_status", "calendar_events", ["status"])

    # Chat messages
    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=True),
        sa.Column("class_division_id", sa.Integer(), nullable=True),
        sa.Column(
            "visibility_scope", sa.Enum(*VISIBILITY), nullable=False, server_default="direct"
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("approval_status", sa.Enum(*APPROVAL), nullable=False, server_default="pending"),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_chat_messages_sender_id", "chat_messages", ["sender_id"])
    op.create_index("ix_chat_messages_recipient_id", "chat_messages", ["recipient_id"])
    op.create_index("ix_chat_messages_class_division_id", "chat_messages", ["class_division_id"])
    op.create_index("ix_chat_messages_approval_status", "chat_messages", ["approval_status"])

    # Attendance
    op.create_table(
        "student_attendance_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("class_division_id", sa.Integer(), nullable=False),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Enum("present", "absent", "late"), nullable=False),
        sa.Column("remarks", sa.String(500), nullable=True),
        sa.Column("marked_by", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students_master.id"]),
        sa.ForeignKeyConstraint(["class_division_id"], ["class_divisions.id"]),
        sa.ForeignKeyConstraint(["marked_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "attendance_date", name="uq_attendance_student_date"),
        **MYSQL_OPTS,
    )
    op.create_index(
        "ix_student_attendance_records_student_id", "student_attendance_records", ["student_id"]
    )
    op.create_index(
        "ix_student_attendance_records_class_division_id",
        "student_attendance_records",
        ["class_division_id"],
    )
    op.create_index(
        "ix_student_attendance_records_attendance_date",
        "student_attendance_records",
        ["attendance_date"],
    )

    # Notifications
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "notification_type",
            sa.Enum("approval", "rejection", "alert", "announcement", "message", "generic"),
            nullable=False,
            server_default="generic",
        ),
        sa.Column("related_type", sa.String(50), nullable=True),
        sa.Column("related_id", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "sent", "failed"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.Column("error_message", sa.String(500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        **MYSQL_OPTS,
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    for table in (
        "notifications",
        "student_attendance_records",
        "chat_messages",
        "calendar_events",
        "announcements",
        "alerts",
        "activity_participants",
        "activities",
        "homework",
        "parent_student_mappings",
        "student_academic_records",
        "students_master",
        "class_teacher_assignments",
        "class_divisions",
        "users",
    ):
        op.drop_table(table)
