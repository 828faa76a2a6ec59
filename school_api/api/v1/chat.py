"""Chat messages: direct (to one user) or class-wide, moderated before delivery."""
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page, get_policy
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_chat_message, crud_class_division, crud_user
from school_api.database import get_db
from school_api.errors import NotFoundError
from school_api.models.chat_message import ChatMessage
from school_api.models.enums import ApprovalStatus, VisibilityScope
from school_api.models.notification import NotificationType
from school_api.schemas.alert import RejectRequest
from school_api.schemas.chat_message import MessageCreate, MessageResponse, MessageUpdate
from school_api.schemas.common import Page
from school_api.schemas.notification import NotificationPayload
from school_api.services import audience, notification_service, status_machine
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/chat/messages", tags=["chat"])


def _descriptor(msg: ChatMessage) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.message,
        class_division_id=msg.class_division_id,
        owner_id=msg.sender_id,
        approval_status=msg.approval_status,
        visibility_scope=msg.visibility_scope,
        recipient_id=msg.recipient_id,
    )


async def _get_or_404(db: AsyncSession, message_id: int) -> ChatMessage:
    msg = await crud_chat_message.get(db, message_id)
    if not msg:
        raise NotFoundError()
    return msg


async def _deliver(db: AsyncSession, background_tasks: BackgroundTasks, msg: ChatMessage) -> None:
    if msg.recipient_id is not None:
        recipients = {msg.recipient_id}
    else:
        recipients = await audience.audience_for(db, msg.class_division_id)
    recipients.discard(msg.sender_id)
    background_tasks.add_task(
        notification_service.notify,
        recipients,
        NotificationPayload(
            title="New message",
            message=msg.content[:200],
            notification_type=NotificationType.message,
            related_type="message",
            related_id=msg.id,
        ),
    )


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    body: MessageCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    if body.recipient_id is not None:
        recipient = await crud_user.get(db, body.recipient_id)
        if not recipient or not recipient.is_active:
            raise HTTPException(404, "Recipient not found")
        # Direct messages are never class-scoped
        class_division_id = None
        visibility = VisibilityScope.direct
    else:
        if not await crud_class_division.get(db, body.class_division_id):
            raise HTTPException(404, "Class division not found")
        class_division_id = body.class_division_id
        visibility = VisibilityScope.class_specific

    descriptor = ResourceDescriptor(
        type=ResourceType.message,
        class_division_id=class_division_id,
        owner_id=identity.user_id,
        visibility_scope=visibility,
        recipient_id=body.recipient_id,
    )
    decision = (await policy.decide(identity, descriptor, Operation.create)).enforce()
    msg = await crud_chat_message.create(
        db,
        obj_in={"content": body.content, "recipient_id": body.recipient_id},
        sender_id=identity.user_id,
        class_division_id=class_division_id,
        visibility_scope=visibility,
        approval_status=decision.initial_status,
    )
    if msg.approval_status == ApprovalStatus.approved:
        await _deliver(db, background_tasks, msg)
    return msg


@router.get("", response_model=Page[MessageResponse])
async def list_messages(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    class_division_id: Optional[int] = None,
    with_user: Optional[int] = None,
    status: Optional[ApprovalStatus] = None,
):
    """Messages visible to the caller. ``with_user`` narrows to one direct conversation."""
    decision = (
        await policy.decide(identity, ResourceDescriptor(ResourceType.message), Operation.list)
    ).enforce()
    filters = []
    if class_division_id is not None:
        filters.append(ChatMessage.class_division_id == class_division_id)
    if with_user is not None:
        filters.append(
            or_(
                and_(
                    ChatMessage.sender_id == identity.user_id,
                    ChatMessage.recipient_id == with_user,
                ),
                and_(
                    ChatMessage.sender_id == with_user,
                    ChatMessage.recipient_id == identity.user_id,
                ),
            )
        )
    if status is not None:
        filters.append(ChatMessage.approval_status == status)
    rows, total = await crud_chat_message.list_scoped(
        db, decision.scope, filters=filters, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    msg = await _get_or_404(db, message_id)
    (await policy.decide(identity, _descriptor(msg), Operation.read)).enforce()
    return msg


@router.patch("/{message_id}", response_model=MessageResponse)
async def edit_message(
    message_id: int,
    body: MessageUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    msg = await _get_or_404(db, message_id)
    (await policy.decide(identity, _descriptor(msg), Operation.update)).enforce()
    changes = {"content": body.content}
    resubmit = status_machine.status_after_edit(identity, ResourceType.message, msg.approval_status)
    if resubmit is not None:
        changes.update(
            approval_status=resubmit, approved_by=None, approved_at=None, rejection_reason=None
        )
    return await crud_chat_message.update(db, db_obj=msg, obj_in=changes)


@router.post("/{message_id}/approve", response_model=MessageResponse)
async def approve_message(
    message_id: int,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    msg = await _get_or_404(db, message_id)
    (
        await policy.decide_transition(identity, _descriptor(msg), ApprovalStatus.approved)
    ).enforce()
    msg = await crud_chat_message.set_status(
        db, msg, ApprovalStatus.approved, actor_id=identity.user_id
    )
    await _deliver(db, background_tasks, msg)
    return msg


@router.post("/{message_id}/reject", response_model=MessageResponse)
async def reject_message(
    message_id: int,
    body: RejectRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    msg = await _get_or_404(db, message_id)
    (
        await policy.decide_transition(identity, _descriptor(msg), ApprovalStatus.rejected)
    ).enforce()
    msg = await crud_chat_message.set_status(
        db, msg, ApprovalStatus.rejected, actor_id=identity.user_id, reason=body.reason
    )
    background_tasks.add_task(
        notification_service.notify,
        [msg.sender_id],
        NotificationPayload(
            title="Message rejected",
            message=f"Your message was not delivered: {body.reason}",
            notification_type=NotificationType.rejection,
            related_type="message",
            related_id=msg.id,
        ),
    )
    return msg


@router.delete("/{message_id}")
async def delete_message(
    message_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    msg = await _get_or_404(db, message_id)
    (await policy.decide(identity, _descriptor(msg), Operation.delete)).enforce()
    await crud_chat_message.remove(db, id=msg.id)
    return {"success": True}
