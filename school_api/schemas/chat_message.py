from typing import Optional
from pydantic import BaseModel, Field, model_validator
from school_api.models.enums import ApprovalStatus, VisibilityScope


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)
    recipient_id: Optional[int] = None
    class_division_id: Optional[int] = None

    @model_validator(mode="after")
    def require_target(self) -> "MessageCreate":
        if self.recipient_id is None and self.class_division_id is None:
            raise ValueError("recipient_id or class_division_id is required")
        return self


class MessageUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    sender_id: int
    recipient_id: Optional[int]
    class_division_id: Optional[int]
    visibility_scope: VisibilityScope
    content: str
    approval_status: ApprovalStatus
    approved_by: Optional[int]
    rejection_reason: Optional[str]
