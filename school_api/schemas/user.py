from typing import Optional
from pydantic import BaseModel, Field
from school_api.models.user import UserRole


class UserBase(BaseModel):
    full_name: str = Field(..., max_length=100)
    phone_number: str = Field(..., max_length=20)
    role: UserRole


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


class UserResponse(UserBase):
    model_config = {"from_attributes": True}
    id: int
    is_active: bool
