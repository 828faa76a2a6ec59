"""Homework endpoints."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page, get_policy
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_class_division, crud_homework
from school_api.database import get_db
from school_api.errors import NotFoundError
from school_api.models.homework import Homework
from school_api.schemas.common import Page
from school_api.schemas.homework import HomeworkCreate, HomeworkResponse, HomeworkUpdate
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/homework", tags=["homework"])


def _descriptor(hw: Homework) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=hw.class_division_id,
        owner_id=hw.teacher_id,
    )


async def _get_or_404(db: AsyncSession, homework_id: int) -> Homework:
    hw = await crud_homework.get(db, homework_id)
    if not hw:
        raise NotFoundError()
    return hw


@router.get("", response_model=Page[HomeworkResponse])
async def list_homework(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    class_division_id: Optional[int] = None,
    subject: Optional[str] = None,
):
    decision = (
        await policy.decide(identity, ResourceDescriptor(ResourceType.homework), Operation.list)
    ).enforce()
    filters = []
    if class_division_id is not None:
        filters.append(Homework.class_division_id == class_division_id)
    if subject:
        filters.append(Homework.subject == subject)
    rows, total = await crud_homework.list_scoped(
        db, decision.scope, filters=filters, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.get("/{homework_id}", response_model=HomeworkResponse)
async def get_homework(
    homework_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    hw = await _get_or_404(db, homework_id)
    (await policy.decide(identity, _descriptor(hw), Operation.read)).enforce()
    return hw


@router.post("", response_model=HomeworkResponse, status_code=201)
async def create_homework(
    body: HomeworkCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    if not await crud_class_division.get(db, body.class_division_id):
        raise HTTPException(404, "Class division not found")
    descriptor = ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=body.class_division_id,
        owner_id=identity.user_id,
    )
    (await policy.decide(identity, descriptor, Operation.create)).enforce()
    return await crud_homework.create(db, obj_in=body, teacher_id=identity.user_id)


@router.patch("/{homework_id}", response_model=HomeworkResponse)
async def update_homework(
    homework_id: int,
    body: HomeworkUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    hw = await _get_or_404(db, homework_id)
    (await policy.decide(identity, _descriptor(hw), Operation.update)).enforce()
    return await crud_homework.update(db, db_obj=hw, obj_in=body)


@router.delete("/{homework_id}")
async def delete_homework(
    homework_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    hw = await _get_or_404(db, homework_id)
    (await policy.decide(identity, _descriptor(hw), Operation.delete)).enforce()
    await crud_homework.remove(db, id=hw.id)
    return {"success": True}
