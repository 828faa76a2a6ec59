"""Guardian mappings: parent self-service linking, staff management, my children."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import get_identity, get_policy, require_staff
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_guardian, crud_student, crud_user
from school_api.database import get_db
from school_api.models.user import UserRole
from school_api.schemas.guardian import (
    ChildResponse,
    GuardianLinkRequest,
    GuardianMappingCreate,
    GuardianMappingResponse,
    GuardianMappingUpdate,
)
from school_api.services.access_policy import AccessPolicy

router = APIRouter(prefix="/guardians", tags=["guardians"])


@router.post("/link", response_model=GuardianMappingResponse, status_code=201)
async def link_child(
    body: GuardianLinkRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
):
    """A parent links themselves to a student by admission number and name."""
    if not identity.is_parent():
        raise HTTPException(403, "Parent role required")
    student = await crud_student.get_by_admission_number(db, body.admission_number)
    # Same response whether the number is unknown or the name does not match
    if not student or student.full_name.strip().lower() != body.student_name.strip().lower():
        raise HTTPException(404, "Student not found")
    return await crud_guardian.create(
        db,
        obj_in=GuardianMappingCreate(
            parent_id=identity.user_id,
            student_id=student.id,
            relationship=body.relationship,
            is_primary_guardian=body.is_primary_guardian,
        ),
    )


@router.post("", response_model=GuardianMappingResponse, status_code=201)
async def create_mapping(
    body: GuardianMappingCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    parent = await crud_user.get(db, body.parent_id)
    if not parent or parent.role != UserRole.parent:
        raise HTTPException(404, "Parent not found")
    if not await crud_student.get(db, body.student_id):
        raise HTTPException(404, "Student not found")
    return await crud_guardian.create(db, obj_in=body)


@router.patch("/{mapping_id}", response_model=GuardianMappingResponse)
async def update_mapping(
    mapping_id: int,
    body: GuardianMappingUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    mapping = await crud_guardian.get(db, mapping_id)
    if not mapping:
        raise HTTPException(404, "Guardian mapping not found")
    return await crud_guardian.update(db, db_obj=mapping, obj_in=body)


@router.delete("/{mapping_id}")
async def delete_mapping(
    mapping_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    if not await crud_guardian.remove(db, id=mapping_id):
        raise HTTPException(404, "Guardian mapping not found")
    return {"success": True}


@router.get("/children", response_model=list[ChildResponse])
async def my_children(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    if not identity.is_parent():
        raise HTTPException(403, "Parent role required")
    links = await policy.guardian_links(identity.user_id)
    result = []
    for link in links:
        student = await crud_student.get(db, link.student_id)
        result.append(
            ChildResponse(
                student_id=link.student_id,
                full_name=student.full_name,
                admission_number=student.admission_number,
                class_division_id=link.class_division_id,
                relationship=link.relationship,
                is_primary_guardian=link.is_primary_guardian,
            )
        )
    return result
