from datetime import date
from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.attendance import AttendanceStatus


class AttendanceEntry(BaseModel):
    student_id: int
    status: AttendanceStatus
    remarks: Optional[str] = Field(None, max_length=500)


class AttendanceMarkRequest(BaseModel):
    class_division_id: int
    attendance_date: date
    entries: list[AttendanceEntry] = Field(..., min_length=1)


class AttendanceUpdate(BaseModel):
    status: AttendanceStatus
    remarks: Optional[str] = Field(None, max_length=500)


class AttendanceResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    student_id: int
    class_division_id: int
    attendance_date: date
    status: AttendanceStatus
    remarks: Optional[str]
    marked_by: int
