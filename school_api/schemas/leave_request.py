from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from school_api.models.leave_request import LeaveStatus


class LeaveRequestCreate(BaseModel):
    student_id: int
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_dates(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LeaveRequestUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, min_length=1)


class LeaveReviewRequest(BaseModel):
    status: LeaveStatus

    @field_validator("status")
    @classmethod
    def check_decision(cls, value: LeaveStatus) -> LeaveStatus:
        if value == LeaveStatus.pending:
            raise ValueError("status must be approved or rejected")
        return value


class LeaveRequestResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    student_id: int
    class_division_id: Optional[int]
    requested_by: int
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    created_at: datetime
