import enum
from datetime import date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from school_api.models.class_division import ClassDivision
    from school_api.models.guardian import GuardianMapping


class EnrollmentStatus(str, enum.Enum):
    ongoing = "ongoing"
    transferred = "transferred"
    graduated = "graduated"


class Student(Base, TimestampMixin):
    __tablename__ = "students_master"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    admission_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Relationships
    enrollments: Mapped[list["StudentEnrollment"]] = relationship(
        "StudentEnrollment", back_populates="student"
    )
    guardians: Mapped[list["GuardianMapping"]] = relationship(
        "GuardianMapping", back_populates="student"
    )


class StudentEnrollment(Base, TimestampMixin):
    __tablename__ = "student_academic_records"
    __table_args__ = (
        UniqueConstraint("class_division_id", "roll_number", name="uq_enrollment_roll_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students_master.id"), nullable=False, index=True
    )
    class_division_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("class_divisions.id"), nullable=False, index=True
    )
    roll_number: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(EnrollmentStatus), nullable=False, default=EnrollmentStatus.ongoing
    )
    # Equals student_id while ongoing, NULL otherwise: the unique index allows at most
    # one ongoing enrollment per student without needing a partial index.
    ongoing_student_id: Mapped[Optional[int]] = mapped_column(
        Integer, unique=True, nullable=True
    )

    # Relationships
    student: Mapped["Student"] = relationship("Student", back_populates="enrollments")
    class_division: Mapped["ClassDivision"] = relationship(
        "ClassDivision", back_populates="enrollments"
    )
