"""Integration tests for activities, participants and guardian consent."""

from datetime import date, timedelta

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def trip(client, school):
    """A 5A field trip with the parent's child signed up."""
    resp = await client.post(
        "/api/v1/activities",
        json={
            "title": "Planetarium visit",
            "activity_date": (date.today() + timedelta(days=10)).isoformat(),
            "activity_type": "field_trip",
            "class_division_id": school.class_5a.id,
            "max_participants": 1,
        },
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 201
    activity = resp.json()
    resp = await client.post(
        f"/api/v1/activities/{activity['id']}/participants",
        json={"student_id": school.child.id},
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 201
    return activity


def _consent_url(activity, student_id):
    return f"/api/v1/activities/{activity['id']}/participants/{student_id}/consent"


@pytest.mark.asyncio
async def test_guardian_records_consent(client, school, trip):
    """The parent owns nothing here; guardianship alone authorizes the write."""
    resp = await client.put(
        _consent_url(trip, school.child.id),
        json={"consent": True},
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["parent_consent"] is True
    assert data["consent_given_by"] == school.parent.id
    assert data["consent_given_at"] is not None


@pytest.mark.asyncio
async def test_other_parent_consent_looks_like_not_found(client, school, trip):
    resp = await client.put(
        _consent_url(trip, school.child.id),
        json={"consent": True},
        headers=school.auth(school.other_parent),
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_teacher_cannot_consent_for_parent(client, school, trip):
    resp = await client.put(
        _consent_url(trip, school.child.id),
        json={"consent": True},
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_consent_closed_after_completion(client, school, trip):
    resp = await client.patch(
        f"/api/v1/activities/{trip['id']}",
        json={"status": "completed"},
        headers=school.auth(school.legacy_teacher),
    )
    assert resp.status_code == 200
    resp = await client.put(
        _consent_url(trip, school.child.id),
        json={"consent": False},
        headers=school.auth(school.parent),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_started_activity_cannot_be_deleted(client, school, trip):
    headers = school.auth(school.legacy_teacher)
    await client.patch(
        f"/api/v1/activities/{trip['id']}", json={"status": "in_progress"}, headers=headers
    )
    resp = await client.delete(f"/api/v1/activities/{trip['id']}", headers=headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_participant_rules(client, school, trip):
    headers = school.auth(school.legacy_teacher)
    url = f"/api/v1/activities/{trip['id']}/participants"

    # Not in 5A
    resp = await client.post(url, json={"student_id": school.other_child.id}, headers=headers)
    assert resp.status_code == 422

    await client.patch(
        f"/api/v1/activities/{trip['id']}", json={"max_participants": 5}, headers=headers
    )
    # Already signed up
    resp = await client.post(url, json={"student_id": school.child.id}, headers=headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_parent_sees_only_own_child_participation(client, school, trip):
    resp = await client.get(
        f"/api/v1/activities/{trip['id']}/participants", headers=school.auth(school.parent)
    )
    assert resp.status_code == 200
    assert [p["student_id"] for p in resp.json()] == [school.child.id]

    resp = await client.get(
        f"/api/v1/activities/{trip['id']}/participants",
        headers=school.auth(school.other_parent),
    )
    assert resp.status_code == 404
