from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import execute
from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.attendance import AttendanceRecord
from school_api.schemas.attendance import AttendanceEntry, AttendanceUpdate


class CRUDAttendance(ScopedCRUD[AttendanceRecord, AttendanceEntry, AttendanceUpdate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(
            owner=AttendanceRecord.marked_by,
            class_division=AttendanceRecord.class_division_id,
            student=AttendanceRecord.student_id,
        )

    def default_order(self):
        return [AttendanceRecord.attendance_date.desc(), AttendanceRecord.student_id.asc()]

    async def get_for_student_on(
        self, db: AsyncSession, student_id: int, attendance_date: date
    ) -> Optional[AttendanceRecord]:
        result = await execute(
            db,
            select(AttendanceRecord).where(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.attendance_date == attendance_date,
            ),
        )
        return result.scalar_one_or_none()


crud_attendance = CRUDAttendance(AttendanceRecord)
