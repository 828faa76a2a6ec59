"""Integration tests for attendance marking and visibility."""

from datetime import date

import pytest

TODAY = date.today().isoformat()


async def _mark(client, school, user, class_division, entries):
    return await client.post(
        "/api/v1/attendance",
        json={
            "class_division_id": class_division.id,
            "attendance_date": TODAY,
            "entries": entries,
        },
        headers=school.auth(user),
    )


@pytest.mark.asyncio
async def test_class_teacher_marks_and_remarks(client, school):
    resp = await _mark(
        client, school, school.legacy_teacher, school.class_5a,
        [{"student_id": school.child.id, "status": "absent"}],
    )
    assert resp.status_code == 201
    (record,) = resp.json()
    assert record["status"] == "absent"

    resp = await _mark(
        client, school, school.legacy_teacher, school.class_5a,
        [{"student_id": school.child.id, "status": "late", "remarks": "Bus delay"}],
    )
    assert resp.status_code == 201
    (again,) = resp.json()
    assert again["id"] == record["id"]
    assert again["status"] == "late"


@pytest.mark.asyncio
async def test_unassigned_teacher_cannot_mark(client, school):
    resp = await _mark(
        client, school, school.idle_teacher, school.class_5a,
        [{"student_id": school.child.id, "status": "present"}],
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_student_from_other_class_rejected(client, school):
    resp = await _mark(
        client, school, school.subject_teacher, school.class_5a,
        [{"student_id": school.other_child.id, "status": "present"}],
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_parent_sees_only_own_child(client, school):
    await _mark(
        client, school, school.subject_teacher, school.class_5a,
        [{"student_id": school.child.id, "status": "present"}],
    )
    await _mark(
        client, school, school.subject_teacher, school.class_5b,
        [{"student_id": school.other_child.id, "status": "present"}],
    )

    resp = await client.get("/api/v1/attendance", headers=school.auth(school.parent))
    assert [r["student_id"] for r in resp.json()["items"]] == [school.child.id]

    resp = await client.get("/api/v1/attendance", headers=school.auth(school.principal))
    assert resp.json()["total"] == 2
