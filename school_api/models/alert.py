import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from school_api.models.base import Base, TimestampMixin
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.user import UserRole


class AlertType(str, enum.Enum):
    urgent = "urgent"
    important = "important"
    general = "general"


class Alert(Base, TimestampMixin):
    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    alert_type: Mapped[AlertType] = mapped_column(Enum(AlertType), nullable=False)
    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    class_division_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("class_divisions.id"), nullable=True, index=True
    )
    visibility_scope: Mapped[VisibilityScope] = mapped_column(
        Enum(VisibilityScope), nullable=False, default=VisibilityScope.school_wide
    )
    # NULL targets every role
    audience_role: Mapped[Optional[UserRole]] = mapped_column(Enum(UserRole), nullable=True)
    status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.draft, index=True
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
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
