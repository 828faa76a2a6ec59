import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from school_api.models.base import Base, TimestampMixin
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.user import UserRole


class AnnouncementType(str, enum.Enum):
    circular = "circular"
    general = "general"
    urgent = "urgent"
    academic = "academic"
    administrative = "administrative"


class Priority(str, enum.Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


class Announcement(Base, TimestampMixin):
    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    announcement_type: Mapped[AnnouncementType] = mapped_column(
        Enum(AnnouncementType), nullable=False
    )
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.normal
    )
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    class_division_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("class_divisions.id"), nullable=True, index=True
    )
    visibility_scope: Mapped[VisibilityScope] = mapped_column(
        Enum(VisibilityScope), nullable=False, default=VisibilityScope.school_wide
    )
    audience_role: Mapped[Optional[UserRole]] = mapped_column(Enum(UserRole), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.pending, index=True
    )
    approved_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    rejected_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
