"""Activity endpoints, including participants and parent consent."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page, get_policy
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_activity, crud_class_division, crud_enrollment, crud_participant
from school_api.database import get_db
from school_api.errors import NotFoundError, StateConflictError
from school_api.models.activity import Activity, ActivityStatus, ActivityType
from school_api.schemas.activity import (
    ActivityCreate,
    ActivityResponse,
    ActivityUpdate,
    ConsentUpdate,
    ParticipantCreate,
    ParticipantResponse,
)
from school_api.schemas.common import Page
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/activities", tags=["activities"])

# Consent can no longer change once the activity is over
_CLOSED = (ActivityStatus.completed, ActivityStatus.cancelled)


def _descriptor(activity: Activity) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.activity,
        class_division_id=activity.class_division_id,
        owner_id=activity.teacher_id,
        state=activity.status.value,
    )


async def _get_or_404(db: AsyncSession, activity_id: int) -> Activity:
    activity = await crud_activity.get(db, activity_id)
    if not activity:
        raise NotFoundError()
    return activity


@router.get("", response_model=Page[ActivityResponse])
async def list_activities(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    class_division_id: Optional[int] = None,
    activity_type: Optional[ActivityType] = None,
    status: Optional[ActivityStatus] = None,
):
    decision = (
        await policy.decide(identity, ResourceDescriptor(ResourceType.activity), Operation.list)
    ).enforce()
    filters = []
    if class_division_id is not None:
        filters.append(Activity.class_division_id == class_division_id)
    if activity_type is not None:
        filters.append(Activity.activity_type == activity_type)
    if status is not None:
        filters.append(Activity.status == status)
    rows, total = await crud_activity.list_scoped(
        db, decision.scope, filters=filters, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(
    activity_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    activity = await _get_or_404(db, activity_id)
    (await policy.decide(identity, _descriptor(activity), Operation.read)).enforce()
    return activity


@router.post("", response_model=ActivityResponse, status_code=201)
async def create_activity(
    body: ActivityCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    if body.class_division_id is not None and not await crud_class_division.get(
        db, body.class_division_id
    ):
        raise HTTPException(404, "Class division not found")
    descriptor = ResourceDescriptor(
        type=ResourceType.activity,
        class_division_id=body.class_division_id,
        owner_id=identity.user_id,
    )
    (await policy.decide(identity, descriptor, Operation.create)).enforce()
    return await crud_activity.create(db, obj_in=body, teacher_id=identity.user_id)


@router.patch("/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: int,
    body: ActivityUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    activity = await _get_or_404(db, activity_id)
    (await policy.decide(identity, _descriptor(activity), Operation.update)).enforce()
    return await crud_activity.update(db, db_obj=activity, obj_in=body)


@router.delete("/{activity_id}")
async def delete_activity(
    activity_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    activity = await _get_or_404(db, activity_id)
    (await policy.decide(identity, _descriptor(activity), Operation.delete)).enforce()
    await crud_activity.remove(db, id=activity.id)
    return {"success": True}


# ── Participants ────────────────────────────────────────────────────────────


@router.get("/{activity_id}/participants", response_model=list[ParticipantResponse])
async def list_participants(
    activity_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    activity = await _get_or_404(db, activity_id)
    (await policy.decide(identity, _descriptor(activity), Operation.read)).enforce()
    participants = await crud_participant.get_for_activity(db, activity.id)
    if identity.is_parent():
        children = {l.student_id for l in await policy.guardian_links(identity.user_id)}
        participants = [p for p in participants if p.student_id in children]
    return participants


@router.post(
    "/{activity_id}/participants", response_model=ParticipantResponse, status_code=201
)
async def add_participant(
    activity_id: int,
    body: ParticipantCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    activity = await _get_or_404(db, activity_id)
    (await policy.decide(identity, _descriptor(activity), Operation.update)).enforce()
    if activity.status in _CLOSED:
        raise StateConflictError(f"Activity is {activity.status.value}")
    if activity.class_division_id is not None:
        enrollment = await crud_enrollment.get_ongoing(db, body.student_id)
        if not enrollment or enrollment.class_division_id != activity.class_division_id:
            raise HTTPException(422, "Student is not enrolled in this activity's class")
    if activity.max_participants is not None and (
        await crud_participant.count_for_activity(db, activity.id) >= activity.max_participants
    ):
        raise StateConflictError("Activity is full")
    return await crud_participant.create(db, obj_in=body, activity_id=activity.id)


@router.put(
    "/{activity_id}/participants/{student_id}/consent", response_model=ParticipantResponse
)
async def update_consent(
    activity_id: int,
    student_id: int,
    body: ConsentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    """Record a guardian's consent. Authorized by guardianship, not by who owns the activity."""
    descriptor = ResourceDescriptor(type=ResourceType.activity_consent, student_id=student_id)
    (await policy.decide(identity, descriptor, Operation.update)).enforce()

    activity = await _get_or_404(db, activity_id)
    participant = await crud_participant.get_pair(db, activity.id, student_id)
    if not participant:
        raise NotFoundError()
    if activity.status in _CLOSED:
        raise StateConflictError(f"Activity is {activity.status.value}")
    return await crud_participant.record_consent(
        db, participant, consent=body.consent, given_by=identity.user_id
    )
