"""Announcement endpoints with approval workflow."""
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import (
    PageParams,
    get_identity,
    get_page,
    get_policy,
    require_staff,
)
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_announcement, crud_class_division
from school_api.database import get_db
from school_api.errors import NotFoundError
from school_api.models.announcement import Announcement, AnnouncementType, Priority
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.notification import NotificationType
from school_api.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
    ApprovalRequest,
)
from school_api.schemas.common import Page
from school_api.schemas.notification import NotificationPayload
from school_api.services import audience, notification_service, status_machine
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import (
    Operation,
    ResourceDescriptor,
    ResourceType,
    ScopeFilter,
)

router = APIRouter(prefix="/announcements", tags=["announcements"])


def _descriptor(a: Announcement) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.announcement,
        class_division_id=a.class_division_id,
        owner_id=a.created_by,
        approval_status=a.status,
        visibility_scope=a.visibility_scope,
        audience_role=a.audience_role,
    )


async def _get_or_404(db: AsyncSession, announcement_id: int) -> Announcement:
    a = await crud_announcement.get(db, announcement_id)
    if not a:
        raise NotFoundError()
    return a


def _publish(background_tasks: BackgroundTasks, recipients: set[int], a: Announcement) -> None:
    background_tasks.add_task(
        notification_service.notify,
        recipients,
        NotificationPayload(
            title=a.title,
            message=a.content[:500],
            notification_type=NotificationType.announcement,
            related_type="announcement",
            related_id=a.id,
        ),
    )


@router.post("", response_model=AnnouncementResponse, status_code=201)
async def create_announcement(
    body: AnnouncementCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    if body.class_division_id is not None and not await crud_class_division.get(
        db, body.class_division_id
    ):
        raise HTTPException(404, "Class division not found")
    scope = (
        VisibilityScope.class_specific
        if body.class_division_id is not None
        else VisibilityScope.school_wide
    )
    descriptor = ResourceDescriptor(
        type=ResourceType.announcement,
        class_division_id=body.class_division_id,
        owner_id=identity.user_id,
        visibility_scope=scope,
    )
    decision = (await policy.decide(identity, descriptor, Operation.create)).enforce()
    stamp = {}
    if decision.initial_status == ApprovalStatus.approved:
        stamp = {"approved_by": identity.user_id, "approved_at": datetime.utcnow()}
    a = await crud_announcement.create(
        db,
        obj_in=body,
        created_by=identity.user_id,
        visibility_scope=scope,
        status=decision.initial_status,
        **stamp,
    )
    if a.status == ApprovalStatus.approved:
        _publish(
            background_tasks,
            await audience.audience_for(db, a.class_division_id, a.audience_role),
            a,
        )
    return a


@router.get("", response_model=Page[AnnouncementResponse])
async def list_announcements(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    status: Optional[ApprovalStatus] = None,
    announcement_type: Optional[AnnouncementType] = None,
    priority: Optional[Priority] = None,
    featured: Optional[bool] = None,
    include_expired: bool = False,
):
    decision = (
        await policy.decide(
            identity, ResourceDescriptor(ResourceType.announcement), Operation.list
        )
    ).enforce()
    filters = []
    if status is not None:
        filters.append(Announcement.status == status)
    if announcement_type is not None:
        filters.append(Announcement.announcement_type == announcement_type)
    if priority is not None:
        filters.append(Announcement.priority == priority)
    if featured is not None:
        filters.append(Announcement.is_featured == featured)
    if not include_expired:
        filters.append(
            or_(Announcement.expires_at.is_(None), Announcement.expires_at > datetime.utcnow())
        )
    rows, total = await crud_announcement.list_scoped(
        db, decision.scope, filters=filters, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.get("/pending", response_model=Page[AnnouncementResponse])
async def pending_queue(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
    paging: Annotated[PageParams, Depends(get_page)],
):
    """Moderation queue for admin/principal."""
    rows, total = await crud_announcement.list_scoped(
        db,
        ScopeFilter.everything(),
        filters=[Announcement.status == ApprovalStatus.pending],
        skip=paging.skip,
        limit=paging.limit,
    )
    return paging.wrap(rows, total)


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    announcement_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    a = await _get_or_404(db, announcement_id)
    (await policy.decide(identity, _descriptor(a), Operation.read)).enforce()
    return a


@router.patch("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: int,
    body: AnnouncementUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    """Edit content. A teacher editing rejected or approved content sends it back for approval."""
    a = await _get_or_404(db, announcement_id)
    (await policy.decide(identity, _descriptor(a), Operation.update)).enforce()
    changes = body.model_dump(exclude_unset=True)
    resubmit = status_machine.status_after_edit(identity, ResourceType.announcement, a.status)
    if resubmit is not None:
        changes.update(
            status=resubmit,
            approved_by=None,
            approved_at=None,
            rejected_by=None,
            rejected_at=None,
            rejection_reason=None,
        )
    return await crud_announcement.update(db, db_obj=a, obj_in=changes)


@router.post("/{announcement_id}/approval", response_model=AnnouncementResponse)
async def review_announcement(
    announcement_id: int,
    body: ApprovalRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    if body.action == "reject" and not body.rejection_reason:
        raise HTTPException(422, "rejection_reason is required when rejecting")
    target = ApprovalStatus.approved if body.action == "approve" else ApprovalStatus.rejected
    a = await _get_or_404(db, announcement_id)
    (await policy.decide_transition(identity, _descriptor(a), target)).enforce()
    a = await crud_announcement.set_status(
        db, a, target, actor_id=identity.user_id, reason=body.rejection_reason
    )

    verdict = "approved" if target == ApprovalStatus.approved else "rejected"
    message = f'Your announcement "{a.title}" was {verdict}.'
    if body.rejection_reason:
        message += f" Reason: {body.rejection_reason}"
    background_tasks.add_task(
        notification_service.notify,
        [a.created_by],
        NotificationPayload(
            title=f"Announcement {verdict}",
            message=message,
            notification_type=(
                NotificationType.approval
                if target == ApprovalStatus.approved
                else NotificationType.rejection
            ),
            related_type="announcement",
            related_id=a.id,
        ),
    )
    if target == ApprovalStatus.approved:
        recipients = await audience.audience_for(db, a.class_division_id, a.audience_role)
        recipients.discard(a.created_by)
        _publish(background_tasks, recipients, a)
    return a


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    a = await _get_or_404(db, announcement_id)
    (await policy.decide(identity, _descriptor(a), Operation.delete)).enforce()
    await crud_announcement.remove(db, id=a.id)
    return {"success": True}
