from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class HomeworkBase(BaseModel):
    class_division_id: int
    subject: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    due_date: datetime


class HomeworkCreate(HomeworkBase):
    pass


class HomeworkUpdate(BaseModel):
    subject: Optional[str] = Field(None, min_length=1, max_length=100)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    due_date: Optional[datetime] = None


class HomeworkResponse(HomeworkBase):
    model_config = {"from_attributes": True}
    id: int
    teacher_id: int
