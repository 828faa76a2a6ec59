"""Leave requests: guardians ask, class teachers and staff decide."""
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page, get_policy
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_enrollment, crud_leave_request, crud_student
from school_api.database import get_db
from school_api.errors import NotFoundError
from school_api.models.leave_request import LeaveRequest, LeaveStatus
from school_api.models.notification import NotificationType
from school_api.schemas.common import Page
from school_api.schemas.leave_request import (
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveRequestUpdate,
    LeaveReviewRequest,
)
from school_api.schemas.notification import NotificationPayload
from school_api.services import assignment_resolver, guardian_resolver, notification_service
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])


def _descriptor(leave: LeaveRequest) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.leave_request,
        class_division_id=leave.class_division_id,
        owner_id=leave.requested_by,
        student_id=leave.student_id,
        state=leave.status.value,
    )


async def _get_or_404(db: AsyncSession, leave_id: int) -> LeaveRequest:
    leave = await crud_leave_request.get(db, leave_id)
    if not leave:
        raise NotFoundError()
    return leave


def _filters(
    status: Optional[LeaveStatus],
    student_id: Optional[int],
    class_division_id: Optional[int],
    from_date: Optional[date],
    to_date: Optional[date],
) -> list:
    filters = []
    if status is not None:
        filters.append(LeaveRequest.status == status)
    if student_id is not None:
        filters.append(LeaveRequest.student_id == student_id)
    if class_division_id is not None:
        filters.append(LeaveRequest.class_division_id == class_division_id)
    # Overlap with [from_date, to_date]
    if to_date is not None:
        filters.append(LeaveRequest.start_date <= to_date)
    if from_date is not None:
        filters.append(LeaveRequest.end_date >= from_date)
    return filters


@router.post("", response_model=LeaveRequestResponse, status_code=201)
async def create_leave_request(
    body: LeaveRequestCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    enrollment = await crud_enrollment.get_ongoing(db, body.student_id)
    class_division_id = enrollment.class_division_id if enrollment else None
    descriptor = ResourceDescriptor(
        type=ResourceType.leave_request,
        class_division_id=class_division_id,
        owner_id=identity.user_id,
        student_id=body.student_id,
    )
    (await policy.decide(identity, descriptor, Operation.create)).enforce()
    if not await crud_student.get(db, body.student_id):
        raise NotFoundError()

    leave = await crud_leave_request.create(
        db,
        obj_in=body,
        class_division_id=class_division_id,
        requested_by=identity.user_id,
        status=LeaveStatus.pending,
    )
    if class_division_id is not None:
        reviewers = await assignment_resolver.teachers_for_class(db, class_division_id)
        reviewers.discard(identity.user_id)
        if reviewers:
            background_tasks.add_task(
                notification_service.notify,
                sorted(reviewers),
                NotificationPayload(
                    title="Leave request awaiting review",
                    message=f"{leave.start_date} to {leave.end_date}: {leave.reason}",
                    notification_type=NotificationType.leave_request,
                    related_type="leave_request",
                    related_id=leave.id,
                ),
            )
    return leave


@router.get("", response_model=Page[LeaveRequestResponse])
async def list_leave_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    status: Optional[LeaveStatus] = None,
    student_id: Optional[int] = None,
    class_division_id: Optional[int] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
):
    decision = (
        await policy.decide(
            identity, ResourceDescriptor(ResourceType.leave_request), Operation.list
        )
    ).enforce()
    rows, total = await crud_leave_request.list_scoped(
        db,
        decision.scope,
        filters=_filters(status, student_id, class_division_id, from_date, to_date),
        skip=paging.skip,
        limit=paging.limit,
    )
    return paging.wrap(rows, total)


@router.get("/my-children", response_model=Page[LeaveRequestResponse])
async def list_my_children_leave_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    status: Optional[LeaveStatus] = None,
    student_id: Optional[int] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
):
    """A parent's view across their children; naming someone else's child is refused."""
    if not identity.is_parent():
        raise HTTPException(403, "Parent role required")
    if student_id is not None:
        links = await policy.guardian_links(identity.user_id)
        if student_id not in guardian_resolver.enrolled_student_ids(links):
            raise HTTPException(403, "Not a guardian of this student")
    decision = (
        await policy.decide(
            identity, ResourceDescriptor(ResourceType.leave_request), Operation.list
        )
    ).enforce()
    rows, total = await crud_leave_request.list_scoped(
        db,
        decision.scope,
        filters=_filters(status, student_id, None, from_date, to_date),
        skip=paging.skip,
        limit=paging.limit,
    )
    return paging.wrap(rows, total)


@router.get("/{leave_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    leave_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    leave = await _get_or_404(db, leave_id)
    (await policy.decide(identity, _descriptor(leave), Operation.read)).enforce()
    return leave


@router.patch("/{leave_id}", response_model=LeaveRequestResponse)
async def update_leave_request(
    leave_id: int,
    body: LeaveRequestUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    """The requester may revise a request until it has been reviewed."""
    leave = await _get_or_404(db, leave_id)
    (await policy.decide(identity, _descriptor(leave), Operation.update)).enforce()
    start = body.start_date or leave.start_date
    end = body.end_date or leave.end_date
    if end < start:
        raise HTTPException(422, "end_date must not be before start_date")
    return await crud_leave_request.update(db, db_obj=leave, obj_in=body)


@router.put("/{leave_id}/status", response_model=LeaveRequestResponse)
async def review_leave_request(
    leave_id: int,
    body: LeaveReviewRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    leave = await _get_or_404(db, leave_id)
    (await policy.decide_review(identity, _descriptor(leave))).enforce()
    leave = await crud_leave_request.review(db, leave, body.status, reviewer_id=identity.user_id)
    if leave.requested_by != identity.user_id:
        background_tasks.add_task(
            notification_service.notify,
            [leave.requested_by],
            NotificationPayload(
                title=f"Leave request {leave.status.value}",
                message=f"{leave.start_date} to {leave.end_date}",
                notification_type=NotificationType.leave_request,
                related_type="leave_request",
                related_id=leave.id,
            ),
        )
    return leave


@router.delete("/{leave_id}")
async def delete_leave_request(
    leave_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    """Withdraw a request that has not been reviewed yet."""
    leave = await _get_or_404(db, leave_id)
    (await policy.decide(identity, _descriptor(leave), Operation.delete)).enforce()
    await crud_leave_request.remove(db, id=leave.id)
    return {"success": True}
