"""Integration tests for leave requests: filing, visibility and review."""

from datetime import date, timedelta

import pytest

START = date.today() + timedelta(days=3)
END = START + timedelta(days=1)


def _body(student, **extra):
    return {
        "student_id": student.id,
        "start_date": START.isoformat(),
        "end_date": END.isoformat(),
        "reason": "Family wedding",
        **extra,
    }


async def _file(client, school, user, student):
    resp = await client.post(
        "/api/v1/leave-requests", json=_body(student), headers=school.auth(user)
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_parent_files_for_child_and_class_teachers_are_told(client, school, notify_mock):
    leave = await _file(client, school, school.parent, school.child)
    assert leave["status"] == "pending"
    assert leave["class_division_id"] == school.class_5a.id
    assert leave["requested_by"] == school.parent.id

    recipients, payload = notify_mock.await_args.args
    assert set(recipients) == {school.legacy_teacher.id, school.subject_teacher.id}
    assert payload.related_id == leave["id"]


@pytest.mark.asyncio
async def test_other_familys_child_looks_like_missing_student(client, school):
    other = await client.post(
        "/api/v1/leave-requests", json=_body(school.other_child), headers=school.auth(school.parent)
    )
    missing = await client.post(
        "/api/v1/leave-requests",
        json={**_body(school.child), "student_id": 999999},
        headers=school.auth(school.parent),
    )
    assert other.status_code == missing.status_code == 404
    assert other.json() == missing.json()


@pytest.mark.asyncio
async def test_end_before_start_is_rejected(client, school):
    resp = await client.post(
        "/api/v1/leave-requests",
        json=_body(school.child, end_date=(START - timedelta(days=1)).isoformat()),
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_visibility_follows_guardianship_and_class(client, school):
    mine = await _file(client, school, school.parent, school.child)
    theirs = await _file(client, school, school.other_parent, school.other_child)

    async def ids(user):
        resp = await client.get("/api/v1/leave-requests", headers=school.auth(user))
        assert resp.status_code == 200
        return {item["id"] for item in resp.json()["items"]}

    assert await ids(school.parent) == {mine["id"]}
    assert await ids(school.legacy_teacher) == {mine["id"]}
    assert await ids(school.subject_teacher) == {mine["id"], theirs["id"]}
    assert await ids(school.idle_teacher) == set()
    assert await ids(school.principal) == {mine["id"], theirs["id"]}

    resp = await client.get(
        f"/api/v1/leave-requests/{theirs['id']}", headers=school.auth(school.parent)
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_my_children_view(client, school):
    mine = await _file(client, school, school.parent, school.child)
    resp = await client.get("/api/v1/leave-requests/my-children", headers=school.auth(school.parent))
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()["items"]] == [mine["id"]]

    resp = await client.get(
        "/api/v1/leave-requests/my-children",
        params={"student_id": school.other_child.id},
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 403

    resp = await client.get(
        "/api/v1/leave-requests/my-children", headers=school.auth(school.legacy_teacher)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_date_window_filter(client, school):
    await _file(client, school, school.parent, school.child)
    headers = school.auth(school.principal)

    resp = await client.get(
        "/api/v1/leave-requests",
        params={"from_date": END.isoformat(), "to_date": (END + timedelta(days=5)).isoformat()},
        headers=headers,
    )
    assert resp.json()["total"] == 1

    resp = await client.get(
        "/api/v1/leave-requests",
        params={"from_date": (END + timedelta(days=1)).isoformat()},
        headers=headers,
    )
    assert resp.json()["total"] == 0


@pytest.mark.asyncio
async def test_class_teacher_approves_and_parent_is_told(client, school, notify_mock):
    leave = await _file(client, school, school.parent, school.child)
    url = f"/api/v1/leave-requests/{leave['id']}/status"

    resp = await client.put(url, json={"status": "approved"}, headers=school.auth(school.idle_teacher))
    assert resp.status_code == 403
    resp = await client.put(url, json={"status": "approved"}, headers=school.auth(school.parent))
    assert resp.status_code == 403
    resp = await client.put(url, json={"status": "pending"}, headers=school.auth(school.principal))
    assert resp.status_code == 422

    resp = await client.put(
        url, json={"status": "approved"}, headers=school.auth(school.legacy_teacher)
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "approved"
    assert data["reviewed_by"] == school.legacy_teacher.id
    assert data["reviewed_at"] is not None

    recipients, payload = notify_mock.await_args.args
    assert recipients == [school.parent.id]
    assert payload.title == "Leave request approved"

    resp = await client.put(url, json={"status": "rejected"}, headers=school.auth(school.principal))
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_requester_edits_and_withdraws_until_reviewed(client, school):
    leave = await _file(client, school, school.parent, school.child)
    url = f"/api/v1/leave-requests/{leave['id']}"
    headers = school.auth(school.parent)

    resp = await client.patch(url, json={"reason": "Fever"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["reason"] == "Fever"

    resp = await client.patch(
        url, json={"end_date": (START - timedelta(days=1)).isoformat()}, headers=headers
    )
    assert resp.status_code == 422

    resp = await client.patch(
        url, json={"reason": "Not yours"}, headers=school.auth(school.other_parent)
    )
    assert resp.status_code == 404

    await client.put(
        f"{url}/status", json={"status": "rejected"}, headers=school.auth(school.principal)
    )
    resp = await client.delete(url, headers=headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_teacher_files_for_own_class_only(client, school):
    resp = await client.post(
        "/api/v1/leave-requests",
        json=_body(school.child),
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 201

    resp = await client.post(
        "/api/v1/leave-requests",
        json=_body(school.other_child),
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 403
