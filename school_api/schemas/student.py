from datetime import date
from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.student import EnrollmentStatus


class StudentBase(BaseModel):
    full_name: str = Field(..., max_length=100)
    admission_number: str = Field(..., max_length=50)
    date_of_birth: Optional[date] = None


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None


class StudentResponse(StudentBase):
    model_config = {"from_attributes": True}
    id: int


class EnrollmentCreate(BaseModel):
    student_id: int
    class_division_id: int
    roll_number: str = Field(..., max_length=20)
    status: EnrollmentStatus = EnrollmentStatus.ongoing


class EnrollmentUpdate(BaseModel):
    roll_number: Optional[str] = Field(None, max_length=20)
    status: Optional[EnrollmentStatus] = None


class EnrollmentResponse(EnrollmentCreate):
    model_config = {"from_attributes": True}
    id: int
