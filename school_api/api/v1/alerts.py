"""Alert endpoints: draft → pending → approved/rejected → sent."""
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page, get_policy
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_alert, crud_class_division, crud_user
from school_api.database import get_db
from school_api.errors import NotFoundError
from school_api.models.alert import Alert, AlertType
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.notification import NotificationType
from school_api.schemas.alert import AlertCreate, AlertResponse, RejectRequest
from school_api.schemas.common import Page
from school_api.schemas.notification import NotificationPayload
from school_api.services import audience, notification_service, status_machine
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/alerts", tags=["alerts"])


def _descriptor(alert: Alert) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.alert,
        class_division_id=alert.class_division_id,
        owner_id=alert.sender_id,
        approval_status=alert.status,
        visibility_scope=alert.visibility_scope,
        audience_role=alert.audience_role,
    )


async def _get_or_404(db: AsyncSession, alert_id: int) -> Alert:
    alert = await crud_alert.get(db, alert_id)
    if not alert:
        raise NotFoundError()
    return alert


async def _transition(
    db: AsyncSession,
    policy: AccessPolicy,
    identity: IdentityContext,
    alert: Alert,
    target: ApprovalStatus,
    reason: Optional[str] = None,
) -> Alert:
    (await policy.decide_transition(identity, _descriptor(alert), target)).enforce()
    return await crud_alert.set_status(db, alert, target, actor_id=identity.user_id, reason=reason)


async def _notify_staff_of_submission(
    db: AsyncSession, background_tasks: BackgroundTasks, alert: Alert
) -> None:
    staff = [u.id for u in await crud_user.get_staff(db)]
    background_tasks.add_task(
        notification_service.notify,
        staff,
        NotificationPayload(
            title="Alert awaiting approval",
            message=alert.title,
            notification_type=NotificationType.approval,
            related_type="alert",
            related_id=alert.id,
        ),
    )


@router.post("", response_model=AlertResponse, status_code=201)
async def create_alert(
    body: AlertCreate,
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
        type=ResourceType.alert,
        class_division_id=body.class_division_id,
        owner_id=identity.user_id,
        visibility_scope=scope,
    )
    (await policy.decide(identity, descriptor, Operation.create)).enforce()

    status = status_machine.initial_status(identity, draft=body.draft)
    alert = await crud_alert.create(
        db,
        obj_in=body.model_dump(exclude={"draft"}),
        sender_id=identity.user_id,
        visibility_scope=scope,
        status=status,
    )
    if status == ApprovalStatus.pending:
        await _notify_staff_of_submission(db, background_tasks, alert)
    return alert


@router.get("", response_model=Page[AlertResponse])
async def list_alerts(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    status: Optional[ApprovalStatus] = None,
    alert_type: Optional[AlertType] = None,
    class_division_id: Optional[int] = None,
):
    decision = (
        await policy.decide(identity, ResourceDescriptor(ResourceType.alert), Operation.list)
    ).enforce()
    filters = []
    if status is not None:
        filters.append(Alert.status == status)
    if alert_type is not None:
        filters.append(Alert.alert_type == alert_type)
    if class_division_id is not None:
        filters.append(Alert.class_division_id == class_division_id)
    rows, total = await crud_alert.list_scoped(
        db, decision.scope, filters=filters, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.get("/{alert_id}", response_model=AlertResponse)
async def get_alert(
    alert_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    alert = await _get_or_404(db, alert_id)
    (await policy.decide(identity, _descriptor(alert), Operation.read)).enforce()
    return alert


@router.post("/{alert_id}/submit", response_model=AlertResponse)
async def submit_alert(
    alert_id: int,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    """Submit a draft. Staff submissions skip the queue."""
    alert = await _get_or_404(db, alert_id)
    target = ApprovalStatus.approved if identity.is_staff() else ApprovalStatus.pending
    alert = await _transition(db, policy, identity, alert, target)
    if target == ApprovalStatus.pending:
        await _notify_staff_of_submission(db, background_tasks, alert)
    return alert


@router.post("/{alert_id}/approve", response_model=AlertResponse)
async def approve_alert(
    alert_id: int,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    alert = await _get_or_404(db, alert_id)
    alert = await _transition(db, policy, identity, alert, ApprovalStatus.approved)
    background_tasks.add_task(
        notification_service.notify,
        [alert.sender_id],
        NotificationPayload(
            title="Alert approved",
            message=f'Your alert "{alert.title}" was approved.',
            notification_type=NotificationType.approval,
            related_type="alert",
            related_id=alert.id,
        ),
    )
    return alert


@router.post("/{alert_id}/reject", response_model=AlertResponse)
async def reject_alert(
    alert_id: int,
    body: RejectRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    alert = await _get_or_404(db, alert_id)
    alert = await _transition(db, policy, identity, alert, ApprovalStatus.rejected, body.reason)
    background_tasks.add_task(
        notification_service.notify,
        [alert.sender_id],
        NotificationPayload(
            title="Alert rejected",
            message=f'Your alert "{alert.title}" was rejected: {body.reason}',
            notification_type=NotificationType.rejection,
            related_type="alert",
            related_id=alert.id,
        ),
    )
    return alert


@router.post("/{alert_id}/send", response_model=AlertResponse)
async def send_alert(
    alert_id: int,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    """Dispatch an approved alert to its audience. One-way."""
    alert = await _get_or_404(db, alert_id)
    alert = await _transition(db, policy, identity, alert, ApprovalStatus.sent)
    recipients = await audience.audience_for(db, alert.class_division_id, alert.audience_role)
    background_tasks.add_task(
        notification_service.notify,
        recipients,
        NotificationPayload(
            title=alert.title,
            message=alert.content,
            notification_type=NotificationType.alert,
            related_type="alert",
            related_id=alert.id,
        ),
    )
    return alert


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    alert = await _get_or_404(db, alert_id)
    (await policy.decide(identity, _descriptor(alert), Operation.delete)).enforce()
    await crud_alert.remove(db, id=alert.id)
    return {"success": True}
