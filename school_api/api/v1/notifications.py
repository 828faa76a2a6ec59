"""The caller's own notifications."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_notification
from school_api.database import get_db
from school_api.schemas.common import Page
from school_api.schemas.notification import NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=Page[NotificationResponse])
async def list_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    paging: Annotated[PageParams, Depends(get_page)],
    unread_only: bool = False,
):
    rows, total = await crud_notification.list_for_user(
        db, identity.user_id, unread_only=unread_only, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.post("/read-all")
async def mark_all_read(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
):
    await crud_notification.mark_all_read(db, identity.user_id)
    return {"success": True}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
):
    notification = await crud_notification.get(db, notification_id)
    if not notification or notification.user_id != identity.user_id:
        raise HTTPException(404, "Notification not found")
    return await crud_notification.mark_read(db, notification)
