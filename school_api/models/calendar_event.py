import enum
from datetime import datetime, time
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from school_api.models.base import Base, TimestampMixin
from school_api.models.enums import ApprovalStatus, VisibilityScope


class EventCategory(str, enum.Enum):
    general = "general"
    academic = "academic"
    sports = "sports"
    cultural = "cultural"
    holiday = "holiday"
    exam = "exam"
    meeting = "meeting"
    other = "other"


class CalendarEvent(Base, TimestampMixin):
    __tablename__ = "calendar_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    event_type: Mapped[VisibilityScope] = mapped_column(
        Enum(VisibilityScope), nullable=False, default=VisibilityScope.school_wide
    )
    event_category: Mapped[EventCategory] = mapped_column(
        Enum(EventCategory), nullable=False, default=EventCategory.general
    )
    class_division_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("class_divisions.id"), nullable=True, index=True
    )
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.pending, index=True
    )
    approved_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
