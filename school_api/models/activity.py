import enum
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from school_api.models.student import Student


class ActivityType(str, enum.Enum):
    field_trip = "field_trip"
    sports = "sports"
    cultural = "cultural"
    academic = "academic"
    other = "other"


class ActivityStatus(str, enum.Enum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class Activity(Base, TimestampMixin):
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    activity_date: Mapped[date] = mapped_column(Date, nullable=False)
    activity_type: Mapped[ActivityType] = mapped_column(Enum(ActivityType), nullable=False)
    # NULL means a teacher-specific activity not tied to one class
    class_division_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("class_divisions.id"), nullable=True, index=True
    )
    teacher_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    venue: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[ActivityStatus] = mapped_column(
        Enum(ActivityStatus), nullable=False, default=ActivityStatus.scheduled
    )

    # Relationships
    participants: Mapped[list["ActivityParticipant"]] = relationship(
        "ActivityParticipant", back_populates="activity", cascade="all, delete-orphan"
    )


class ActivityParticipant(Base, TimestampMixin):
    __tablename__ = "activity_participants"
    __table_args__ = (
        UniqueConstraint("activity_id", "student_id", name="uq_activity_participant"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    activity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students_master.id"), nullable=False, index=True
    )
    parent_consent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    consent_given_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    consent_given_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    activity: Mapped["Activity"] = relationship("Activity", back_populates="participants")
    student: Mapped["Student"] = relationship("Student")
