from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from school_api.models.student import StudentEnrollment
    from school_api.models.teacher_assignment import TeacherAssignment
    from school_api.models.user import User


class ClassDivision(Base, TimestampMixin):
    __tablename__ = "class_divisions"
    __table_args__ = (
        UniqueConstraint("level", "division", "academic_year", name="uq_class_division"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level: Mapped[str] = mapped_column(String(50), nullable=False)
    division: Mapped[str] = mapped_column(String(10), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    # Legacy single class teacher; equivalent to an implicit primary class_teacher assignment
    teacher_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )

    # Relationships
    teacher: Mapped[Optional["User"]] = relationship("User")
    assignments: Mapped[list["TeacherAssignment"]] = relationship(
        "TeacherAssignment", back_populates="class_division"
    )
    enrollments: Mapped[list["StudentEnrollment"]] = relationship(
        "StudentEnrollment", back_populates="class_division"
    )

    @property
    def name(self) -> str:
        return f"{self.level} - {self.division}"
