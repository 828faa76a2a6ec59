"""Tests for notification persistence and push dispatch."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from school_api.models import Notification, NotificationStatus, NotificationType, User, UserRole
from school_api.schemas.notification import NotificationPayload
from school_api.services import notification_service, push_service

PAYLOAD = NotificationPayload(
    title="Alert approved",
    message="Your alert was approved.",
    notification_type=NotificationType.approval,
    related_type="alert",
    related_id=7,
)


async def _users(session_factory, count):
    async with session_factory() as db:
        users = [
            User(full_name=f"User {i}", phone_number=f"98000000{i:02d}", role=UserRole.teacher)
            for i in range(count)
        ]
        db.add_all(users)
        await db.commit()
        return [u.id for u in users]


async def _stored(session_factory):
    async with session_factory() as db:
        return (await db.execute(select(Notification).order_by(Notification.user_id))).scalars().all()


@pytest.mark.asyncio
async def test_notify_stores_one_row_per_recipient(session_factory, monkeypatch):
    ids = await _users(session_factory, 2)
    push = AsyncMock(return_value=True)
    monkeypatch.setattr(push_service, "send_push", push)

    stored = await notification_service.notify(
        [*ids, ids[0]], PAYLOAD, session_factory=session_factory
    )

    assert stored == 2
    rows = await _stored(session_factory)
    assert [r.user_id for r in rows] == sorted(ids)
    assert all(r.status == NotificationStatus.sent for r in rows)
    push.assert_awaited_once()


@pytest.mark.asyncio
async def test_push_failure_keeps_rows_as_failed(session_factory, monkeypatch):
    ids = await _users(session_factory, 1)
    monkeypatch.setattr(push_service, "send_push", AsyncMock(side_effect=RuntimeError("boom")))

    assert await notification_service.notify(ids, PAYLOAD, session_factory=session_factory) == 1
    (row,) = await _stored(session_factory)
    assert row.status == NotificationStatus.failed
    assert row.error_message == "boom"


@pytest.mark.asyncio
async def test_unreachable_gateway_marks_failed(session_factory, monkeypatch):
    ids = await _users(session_factory, 1)
    monkeypatch.setattr(push_service, "send_push", AsyncMock(return_value=False))

    await notification_service.notify(ids, PAYLOAD, session_factory=session_factory)
    (row,) = await _stored(session_factory)
    assert row.status == NotificationStatus.failed


@pytest.mark.asyncio
async def test_store_failure_is_swallowed(monkeypatch):
    """The triggering transition has already committed; notify must never raise."""

    def broken_factory():
        raise RuntimeError("database down")

    assert await notification_service.notify([1], PAYLOAD, session_factory=broken_factory) == 0


@pytest.mark.asyncio
async def test_no_recipients_is_a_no_op(session_factory):
    assert await notification_service.notify([], PAYLOAD, session_factory=session_factory) == 0
    assert await _stored(session_factory) == []
