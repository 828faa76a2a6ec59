"""Integration tests for moderated chat messages."""

import pytest


@pytest.mark.asyncio
async def test_parent_message_waits_for_approval(client, school, notify_mock):
    resp = await client.post(
        "/api/v1/chat/messages",
        json={"recipient_id": school.legacy_teacher.id, "content": "Kavya will be late."},
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 201
    msg = resp.json()
    assert msg["approval_status"] == "pending"
    assert msg["class_division_id"] is None
    notify_mock.assert_not_awaited()

    # The recipient cannot see it yet
    resp = await client.get("/api/v1/chat/messages", headers=school.auth(school.legacy_teacher))
    assert msg["id"] not in [m["id"] for m in resp.json()["items"]]

    resp = await client.post(
        f"/api/v1/chat/messages/{msg['id']}/approve", headers=school.auth(school.principal)
    )
    assert resp.status_code == 200
    recipients, _ = notify_mock.await_args.args
    assert set(recipients) == {school.legacy_teacher.id}

    resp = await client.get(
        "/api/v1/chat/messages",
        params={"with_user": school.parent.id},
        headers=school.auth(school.legacy_teacher),
    )
    assert [m["id"] for m in resp.json()["items"]] == [msg["id"]]


@pytest.mark.asyncio
async def test_parent_cannot_message_unrelated_teacher(client, school):
    resp = await client.post(
        "/api/v1/chat/messages",
        json={"recipient_id": school.idle_teacher.id, "content": "Hello"},
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_parent_posts_only_to_childs_class(client, school):
    resp = await client.post(
        "/api/v1/chat/messages",
        json={"class_division_id": school.class_5b.id, "content": "Hello 5B"},
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_rejected_message_resubmits_on_edit(client, school):
    resp = await client.post(
        "/api/v1/chat/messages",
        json={"class_division_id": school.class_5a.id, "content": "Party at mine"},
        headers=school.auth(school.parent),
    )
    msg_id = resp.json()["id"]
    resp = await client.post(
        f"/api/v1/chat/messages/{msg_id}/reject",
        json={"reason": "Off topic"},
        headers=school.auth(school.admin),
    )
    assert resp.json()["approval_status"] == "rejected"

    resp = await client.patch(
        f"/api/v1/chat/messages/{msg_id}",
        json={"content": "Class photo day is Monday"},
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 200
    assert resp.json()["approval_status"] == "pending"
    assert resp.json()["rejection_reason"] is None


@pytest.mark.asyncio
async def test_staff_message_is_delivered_immediately(client, school, notify_mock):
    resp = await client.post(
        "/api/v1/chat/messages",
        json={"class_division_id": school.class_5a.id, "content": "School closes at noon."},
        headers=school.auth(school.principal),
    )
    assert resp.json()["approval_status"] == "approved"
    recipients, _ = notify_mock.await_args.args
    assert set(recipients) == {
        school.legacy_teacher.id,
        school.subject_teacher.id,
        school.parent.id,
    }
