"""Calendar event endpoints."""
from datetime import date, datetime, time, timedelta
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page, get_policy
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_calendar_event, crud_class_division
from school_api.database import get_db
from school_api.errors import NotFoundError
from school_api.models.calendar_event import CalendarEvent, EventCategory
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.notification import NotificationType
from school_api.schemas.alert import RejectRequest
from school_api.schemas.calendar_event import (
    CalendarEventCreate,
    CalendarEventResponse,
    CalendarEventUpdate,
)
from school_api.schemas.common import Page
from school_api.schemas.notification import NotificationPayload
from school_api.services import notification_service, status_machine
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/calendar/events", tags=["calendar"])


def _descriptor(event: CalendarEvent) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.calendar_event,
        class_division_id=event.class_division_id,
        owner_id=event.created_by,
        approval_status=event.status,
        visibility_scope=event.event_type,
    )


async def _get_or_404(db: AsyncSession, event_id: int) -> CalendarEvent:
    event = await crud_calendar_event.get(db, event_id)
    if not event:
        raise NotFoundError()
    return event


def _tell_creator(
    background_tasks: BackgroundTasks, event: CalendarEvent, verdict: str, reason: Optional[str] = None
) -> None:
    message = f'Your event "{event.title}" was {verdict}.'
    if reason:
        message += f" Reason: {reason}"
    background_tasks.add_task(
        notification_service.notify,
        [event.created_by],
        NotificationPayload(
            title=f"Event {verdict}",
            message=message,
            notification_type=(
                NotificationType.approval if verdict == "approved" else NotificationType.rejection
            ),
            related_type="calendar_event",
            related_id=event.id,
        ),
    )


@router.post("", response_model=CalendarEventResponse, status_code=201)
async def create_event(
    body: CalendarEventCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    if body.event_type == VisibilityScope.class_specific and body.class_division_id is None:
        raise HTTPException(422, "class_division_id is required for class-specific events")
    if body.class_division_id is not None and not await crud_class_division.get(
        db, body.class_division_id
    ):
        raise HTTPException(404, "Class division not found")
    descriptor = ResourceDescriptor(
        type=ResourceType.calendar_event,
        class_division_id=body.class_division_id,
        owner_id=identity.user_id,
        visibility_scope=body.event_type,
    )
    decision = (await policy.decide(identity, descriptor, Operation.create)).enforce()
    stamp = {}
    if decision.initial_status == ApprovalStatus.approved:
        stamp = {"approved_by": identity.user_id, "approved_at": datetime.utcnow()}
    return await crud_calendar_event.create(
        db,
        obj_in=body,
        created_by=identity.user_id,
        status=decision.initial_status,
        **stamp,
    )


@router.get("", response_model=Page[CalendarEventResponse])
async def list_events(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    event_category: Optional[EventCategory] = None,
    class_division_id: Optional[int] = None,
    status: Optional[ApprovalStatus] = None,
):
    decision = (
        await policy.decide(
            identity, ResourceDescriptor(ResourceType.calendar_event), Operation.list
        )
    ).enforce()
    filters = []
    if start_date is not None:
        filters.append(CalendarEvent.event_date >= datetime.combine(start_date, time.min))
    if end_date is not None:
        filters.append(
            CalendarEvent.event_date < datetime.combine(end_date + timedelta(days=1), time.min)
        )
    if event_category is not None:
        filters.append(CalendarEvent.event_category == event_category)
    if class_division_id is not None:
        filters.append(CalendarEvent.class_division_id == class_division_id)
    if status is not None:
        filters.append(CalendarEvent.status == status)
    rows, total = await crud_calendar_event.list_scoped(
        db, decision.scope, filters=filters, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.get("/{event_id}", response_model=CalendarEventResponse)
async def get_event(
    event_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    event = await _get_or_404(db, event_id)
    (await policy.decide(identity, _descriptor(event), Operation.read)).enforce()
    return event


@router.patch("/{event_id}", response_model=CalendarEventResponse)
async def update_event(
    event_id: int,
    body: CalendarEventUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    event = await _get_or_404(db, event_id)
    (await policy.decide(identity, _descriptor(event), Operation.update)).enforce()
    changes = body.model_dump(exclude_unset=True)
    resubmit = status_machine.status_after_edit(identity, ResourceType.calendar_event, event.status)
    if resubmit is not None:
        changes.update(status=resubmit, approved_by=None, approved_at=None, rejection_reason=None)
    return await crud_calendar_event.update(db, db_obj=event, obj_in=changes)


@router.post("/{event_id}/approve", response_model=CalendarEventResponse)
async def approve_event(
    event_id: int,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    event = await _get_or_404(db, event_id)
    (
        await policy.decide_transition(identity, _descriptor(event), ApprovalStatus.approved)
    ).enforce()
    event = await crud_calendar_event.set_status(
        db, event, ApprovalStatus.approved, actor_id=identity.user_id
    )
    _tell_creator(background_tasks, event, "approved")
    return event


@router.post("/{event_id}/reject", response_model=CalendarEventResponse)
async def reject_event(
    event_id: int,
    body: RejectRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    event = await _get_or_404(db, event_id)
    (
        await policy.decide_transition(identity, _descriptor(event), ApprovalStatus.rejected)
    ).enforce()
    event = await crud_calendar_event.set_status(
        db, event, ApprovalStatus.rejected, actor_id=identity.user_id, reason=body.reason
    )
    _tell_creator(background_tasks, event, "rejected", body.reason)
    return event


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    event = await _get_or_404(db, event_id)
    (await policy.decide(identity, _descriptor(event), Operation.delete)).enforce()
    await crud_calendar_event.remove(db, id=event.id)
    return {"success": True}
