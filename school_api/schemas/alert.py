from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.alert import AlertType
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.user import UserRole


class AlertCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    alert_type: AlertType
    class_division_id: Optional[int] = None
    audience_role: Optional[UserRole] = None
    # Keep as draft instead of submitting right away
    draft: bool = False


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class AlertResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    title: str
    content: str
    alert_type: AlertType
    sender_id: int
    class_division_id: Optional[int]
    visibility_scope: VisibilityScope
    audience_role: Optional[UserRole]
    status: ApprovalStatus
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    rejection_reason: Optional[str]
    sent_at: Optional[datetime]
