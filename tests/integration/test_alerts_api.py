"""Integration tests for the alert moderation lifecycle over HTTP."""

import pytest

ALERT = {"title": "Sports day moved", "content": "Now on Friday.", "alert_type": "important"}


async def _create(client, school, user, **extra):
    resp = await client.post("/api/v1/alerts", json={**ALERT, **extra}, headers=school.auth(user))
    assert resp.status_code == 201
    return resp.json()


async def _visible_ids(client, school, user):
    resp = await client.get("/api/v1/alerts", headers=school.auth(user))
    assert resp.status_code == 200
    return [a["id"] for a in resp.json()["items"]]


@pytest.mark.asyncio
async def test_teacher_alert_is_pending_and_staff_are_told(client, school, notify_mock):
    alert = await _create(client, school, school.legacy_teacher)
    assert alert["status"] == "pending"
    notified, payload = notify_mock.await_args.args
    assert set(notified) == {school.admin.id, school.principal.id}
    assert payload.related_id == alert["id"]


@pytest.mark.asyncio
async def test_principal_alert_is_auto_approved(client, school):
    alert = await _create(client, school, school.principal)
    assert alert["status"] == "approved"


@pytest.mark.asyncio
async def test_pending_alert_hidden_until_approved(client, school):
    alert = await _create(client, school, school.legacy_teacher)

    assert alert["id"] in await _visible_ids(client, school, school.legacy_teacher)
    assert alert["id"] not in await _visible_ids(client, school, school.idle_teacher)
    assert alert["id"] not in await _visible_ids(client, school, school.parent)

    resp = await client.post(
        f"/api/v1/alerts/{alert['id']}/approve", headers=school.auth(school.principal)
    )
    assert resp.status_code == 200
    assert resp.json()["approved_by"] == school.principal.id

    assert alert["id"] in await _visible_ids(client, school, school.idle_teacher)
    assert alert["id"] in await _visible_ids(client, school, school.parent)


@pytest.mark.asyncio
async def test_teacher_cannot_approve_own_alert(client, school):
    alert = await _create(client, school, school.legacy_teacher)
    resp = await client.post(
        f"/api/v1/alerts/{alert['id']}/approve", headers=school.auth(school.legacy_teacher)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_draft_then_submit(client, school):
    alert = await _create(client, school, school.legacy_teacher, draft=True)
    assert alert["status"] == "draft"
    resp = await client.post(
        f"/api/v1/alerts/{alert['id']}/submit", headers=school.auth(school.legacy_teacher)
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_send_reaches_class_audience(client, school, notify_mock):
    alert = await _create(client, school, school.principal, class_division_id=school.class_5b.id)
    resp = await client.post(
        f"/api/v1/alerts/{alert['id']}/send", headers=school.auth(school.principal)
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "sent"
    recipients, payload = notify_mock.await_args.args
    assert set(recipients) == {school.subject_teacher.id, school.other_parent.id}
    assert payload.title == ALERT["title"]


@pytest.mark.asyncio
async def test_sent_alert_is_frozen(client, school):
    alert = await _create(client, school, school.principal)
    headers = school.auth(school.principal)
    await client.post(f"/api/v1/alerts/{alert['id']}/send", headers=headers)

    resp = await client.post(f"/api/v1/alerts/{alert['id']}/approve", headers=headers)
    assert resp.status_code == 409
    resp = await client.delete(f"/api/v1/alerts/{alert['id']}", headers=headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_rejected_alert_cannot_be_sent(client, school):
    alert = await _create(client, school, school.legacy_teacher)
    headers = school.auth(school.principal)
    resp = await client.post(
        f"/api/v1/alerts/{alert['id']}/reject", json={"reason": "Duplicate"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["rejection_reason"] == "Duplicate"

    resp = await client.post(f"/api/v1/alerts/{alert['id']}/send", headers=headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_teacher_cannot_target_unassigned_class(client, school):
    resp = await client.post(
        "/api/v1/alerts",
        json={**ALERT, "class_division_id": school.class_5b.id},
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 403
