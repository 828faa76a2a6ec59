from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field
from school_api.models.announcement import AnnouncementType, Priority
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.user import UserRole


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    announcement_type: AnnouncementType
    priority: Priority = Priority.normal
    class_division_id: Optional[int] = None
    audience_role: Optional[UserRole] = None
    is_featured: bool = False
    expires_at: Optional[datetime] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    announcement_type: Optional[AnnouncementType] = None
    priority: Optional[Priority] = None
    audience_role: Optional[UserRole] = None
    is_featured: Optional[bool] = None
    expires_at: Optional[datetime] = None


class ApprovalRequest(BaseModel):
    action: Literal["approve", "reject"]
    rejection_reason: Optional[str] = Field(None, min_length=1, max_length=500)


class AnnouncementResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    title: str
    content: str
    announcement_type: AnnouncementType
    priority: Priority
    created_by: int
    class_division_id: Optional[int]
    visibility_scope: VisibilityScope
    audience_role: Optional[UserRole]
    is_featured: bool
    status: ApprovalStatus
    approved_by: Optional[int]
    rejection_reason: Optional[str]
    expires_at: Optional[datetime]
