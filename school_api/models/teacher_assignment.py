import enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from school_api.models.class_division import ClassDivision
    from school_api.models.user import User


class AssignmentType(str, enum.Enum):
    class_teacher = "class_teacher"
    subject_teacher = "subject_teacher"


class TeacherAssignment(Base, TimestampMixin):
    __tablename__ = "class_teacher_assignments"
    __table_args__ = (
        UniqueConstraint(
            "teacher_id",
            "class_division_id",
            "assignment_type",
            "subject",
            name="uq_teacher_assignment",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    teacher_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    class_division_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("class_divisions.id"), nullable=False, index=True
    )
    assignment_type: Mapped[AssignmentType] = mapped_column(
        Enum(AssignmentType), nullable=False, default=AssignmentType.class_teacher
    )
    subject: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    teacher: Mapped["User"] = relationship("User", back_populates="assignments")
    class_division: Mapped["ClassDivision"] = relationship(
        "ClassDivision", back_populates="assignments"
    )
