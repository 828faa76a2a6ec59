"""Notification persistence and dispatch.

``notify`` runs as a FastAPI background task after the request's transaction
has committed, so it opens its own session. Nothing it does can undo the state
transition that triggered it: every failure is logged and swallowed.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from school_api.crud.notifications import crud_notification
from school_api.schemas.notification import NotificationPayload
from school_api.services import push_service

logger = logging.getLogger(__name__)


def _default_session_factory() -> async_sessionmaker[AsyncSession]:
    from school_api.database import AsyncSessionLocal

    return AsyncSessionLocal


async def notify(
    user_ids: Iterable[int],
    payload: NotificationPayload,
    *,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> int:
    """Persist one notification per recipient and push it. Returns the number stored."""
    recipients = sorted(set(user_ids))
    if not recipients:
        return 0
    factory = session_factory or _default_session_factory()

    try:
        async with factory() as db:
            rows = await crud_notification.create_many(db, recipients, payload)
            try:
                ok = await push_service.send_push(
                    recipients,
                    payload.title,
                    payload.message,
                    data={"type": payload.related_type, "id": payload.related_id},
                )
                await crud_notification.mark_delivery(db, rows, delivered=ok)
            except Exception as exc:
                logger.error("Notification push failed: %s", exc)
                await crud_notification.mark_delivery(db, rows, delivered=False, error=str(exc))
            await db.commit()
    except Exception as exc:
        logger.error(
            "Notification dispatch failed for %d recipient(s) (%s): %s",
            len(recipients),
            payload.title,
            exc,
        )
        return 0

    logger.info("Stored %d notification(s): %s", len(recipients), payload.title)
    return len(recipients)
