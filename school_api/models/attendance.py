import enum
from datetime import date
from typing import Optional

from sqlalchemy import Date, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from school_api.models.base import Base, TimestampMixin


class AttendanceStatus(str, enum.Enum):
    present = "present"
    absent = "absent"
    late = "late"


class AttendanceRecord(Base, TimestampMixin):
    __tablename__ = "student_attendance_records"
    __table_args__ = (
        UniqueConstraint("student_id", "attendance_date", name="uq_attendance_student_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students_master.id"), nullable=False, index=True
    )
    class_division_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("class_divisions.id"), nullable=False, index=True
    )
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[AttendanceStatus] = mapped_column(Enum(AttendanceStatus), nullable=False)
    remarks: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    marked_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
