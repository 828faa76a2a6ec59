"""Integration tests for guardian linking and the my-children view."""

import pytest


@pytest.mark.asyncio
async def test_children_lists_graduate_without_class(client, school):
    resp = await client.get("/api/v1/guardians/children", headers=school.auth(school.parent))
    assert resp.status_code == 200
    by_id = {c["student_id"]: c for c in resp.json()}
    assert by_id[school.child.id]["class_division_id"] == school.class_5a.id
    assert by_id[school.graduate.id]["class_division_id"] is None


@pytest.mark.asyncio
async def test_link_requires_matching_name(client, school):
    body = {
        "admission_number": "ADM002",
        "student_name": "Someone Else",
        "relationship": "guardian",
    }
    resp = await client.post(
        "/api/v1/guardians/link", json=body, headers=school.auth(school.parent)
    )
    assert resp.status_code == 404

    body["admission_number"] = "NOPE"
    resp = await client.post(
        "/api/v1/guardians/link", json=body, headers=school.auth(school.parent)
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_link_then_second_primary_conflicts(client, school):
    resp = await client.post(
        "/api/v1/guardians/link",
        json={
            "admission_number": "ADM002",
            "student_name": "rohan",
            "relationship": "guardian",
            "is_primary_guardian": False,
        },
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 201
    mapping = resp.json()
    assert mapping["relationship"] == "guardian"

    resp = await client.patch(
        f"/api/v1/guardians/{mapping['id']}",
        json={"is_primary_guardian": True},
        headers=school.auth(school.admin),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_teacher_cannot_link(client, school):
    resp = await client.post(
        "/api/v1/guardians/link",
        json={"admission_number": "ADM001", "student_name": "Kavya", "relationship": "guardian"},
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 403
