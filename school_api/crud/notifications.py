from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import CRUDBase, execute, flush, paginate
from school_api.models.notification import Notification, NotificationStatus
from school_api.schemas.notification import NotificationPayload


class CRUDNotification(CRUDBase[Notification, NotificationPayload, NotificationPayload]):
    async def create_many(
        self, db: AsyncSession, user_ids: Sequence[int], payload: NotificationPayload
    ) -> list[Notification]:
        rows = [Notification(user_id=uid, **payload.model_dump()) for uid in user_ids]
        db.add_all(rows)
        await flush(db)
        return rows

    async def list_for_user(
        self, db: AsyncSession, user_id: int, *, unread_only: bool = False, skip: int = 0, limit: int = 20
    ) -> tuple[Sequence[Notification], int]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read == False)
        return await paginate(db, stmt.order_by(Notification.id.desc()), skip=skip, limit=limit)

    async def mark_read(self, db: AsyncSession, notification: Notification) -> Notification:
        notification.is_read = True
        db.add(notification)
        await flush(db)
        await db.refresh(notification)
        return notification

    async def mark_all_read(self, db: AsyncSession, user_id: int) -> None:
        await execute(
            db,
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)
            .values(is_read=True),
        )

    async def mark_delivery(
        self,
        db: AsyncSession,
        rows: Sequence[Notification],
        *,
        delivered: bool,
        error: str | None = None,
    ) -> None:
        now = datetime.utcnow()
        for row in rows:
            row.status = NotificationStatus.sent if delivered else NotificationStatus.failed
            row.sent_at = now if delivered else None
            row.error_message = None if delivered else (error or "")[:500]
        await flush(db)


crud_notification = CRUDNotification(Notification)
