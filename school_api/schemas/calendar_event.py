from datetime import datetime, time
from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.calendar_event import EventCategory
from school_api.models.enums import ApprovalStatus, VisibilityScope


class CalendarEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    event_date: datetime
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    event_type: VisibilityScope = VisibilityScope.school_wide
    event_category: EventCategory = EventCategory.general
    class_division_id: Optional[int] = None


class CalendarEventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    event_date: Optional[datetime] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    event_category: Optional[EventCategory] = None


class CalendarEventResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    title: str
    description: str
    event_date: datetime
    start_time: Optional[time]
    end_time: Optional[time]
    event_type: VisibilityScope
    event_category: EventCategory
    class_division_id: Optional[int]
    created_by: int
    status: ApprovalStatus
    approved_by: Optional[int]
    rejection_reason: Optional[str]
