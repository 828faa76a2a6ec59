from typing import Optional
from pydantic import AliasChoices, BaseModel, Field
from school_api.models.guardian import AccessLevel, GuardianRelation


class GuardianMappingCreate(BaseModel):
    parent_id: int
    student_id: int
    relationship: GuardianRelation
    is_primary_guardian: bool = False
    access_level: AccessLevel = AccessLevel.full


class GuardianLinkRequest(BaseModel):
    """Parent self-service link: the student is identified by admission number and name."""

    admission_number: str
    student_name: str
    relationship: GuardianRelation
    is_primary_guardian: bool = False


class GuardianMappingUpdate(BaseModel):
    relationship: Optional[GuardianRelation] = None
    is_primary_guardian: Optional[bool] = None
    access_level: Optional[AccessLevel] = None


class GuardianMappingResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: int
    parent_id: int
    student_id: int
    relationship: GuardianRelation = Field(
        validation_alias=AliasChoices("relationship", "relation")
    )
    is_primary_guardian: bool
    access_level: AccessLevel


class ChildResponse(BaseModel):
    student_id: int
    full_name: str
    admission_number: str
    class_division_id: Optional[int]
    relationship: GuardianRelation
    is_primary_guardian: bool
