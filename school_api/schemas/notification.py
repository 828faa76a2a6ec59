from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.notification import NotificationStatus, NotificationType


class NotificationPayload(BaseModel):
    title: str = Field(..., max_length=200)
    message: str
    notification_type: NotificationType = NotificationType.generic
    related_type: Optional[str] = None
    related_id: Optional[int] = None


class NotificationResponse(NotificationPayload):
    model_config = {"from_attributes": True}
    id: int
    user_id: int
    status: NotificationStatus
    is_read: bool
    created_at: datetime
