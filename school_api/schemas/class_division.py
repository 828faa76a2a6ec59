from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.teacher_assignment import AssignmentType


class ClassDivisionBase(BaseModel):
    level: str = Field(..., max_length=50)
    division: str = Field(..., max_length=10)
    academic_year: str = Field(..., max_length=20)
    teacher_id: Optional[int] = None


class ClassDivisionCreate(ClassDivisionBase):
    pass


class ClassDivisionUpdate(BaseModel):
    level: Optional[str] = Field(None, max_length=50)
    division: Optional[str] = Field(None, max_length=10)
    academic_year: Optional[str] = Field(None, max_length=20)
    teacher_id: Optional[int] = None


class ClassDivisionResponse(ClassDivisionBase):
    model_config = {"from_attributes": True}
    id: int


class TeacherAssignmentCreate(BaseModel):
    teacher_id: int
    class_division_id: int
    assignment_type: AssignmentType = AssignmentType.class_teacher
    subject: Optional[str] = Field(None, max_length=100)
    is_primary: bool = False


class TeacherAssignmentUpdate(BaseModel):
    subject: Optional[str] = Field(None, max_length=100)
    is_primary: Optional[bool] = None
    is_active: Optional[bool] = None


class TeacherAssignmentResponse(TeacherAssignmentCreate):
    model_config = {"from_attributes": True}
    id: int
    is_active: bool


class ResolvedAssignmentResponse(BaseModel):
    class_division_id: int
    assignment_type: AssignmentType
    subject: Optional[str]
    is_primary: bool
    source: str
