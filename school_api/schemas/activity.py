from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.activity import ActivityStatus, ActivityType


class ActivityBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    activity_date: date
    activity_type: ActivityType
    class_division_id: Optional[int] = None
    venue: Optional[str] = Field(None, max_length=200)
    max_participants: Optional[int] = Field(None, ge=1)


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    activity_date: Optional[date] = None
    activity_type: Optional[ActivityType] = None
    venue: Optional[str] = Field(None, max_length=200)
    max_participants: Optional[int] = Field(None, ge=1)
    status: Optional[ActivityStatus] = None


class ActivityResponse(ActivityBase):
    model_config = {"from_attributes": True}
    id: int
    teacher_id: int
    status: ActivityStatus


class ParticipantCreate(BaseModel):
    student_id: int


class ConsentUpdate(BaseModel):
    consent: bool


class ParticipantResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    activity_id: int
    student_id: int
    parent_consent: bool
    consent_given_by: Optional[int]
    consent_given_at: Optional[datetime]
