"""Integration tests for bearer authentication on the HTTP surface."""

import pytest

from school_api.auth.jwt_auth import create_access_token
from school_api.models import UserRole


@pytest.mark.asyncio
async def test_health_needs_no_token(client):
    resp = await client.get("/health")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_missing_token_returns_401(client, school):
    resp = await client.get("/api/v1/homework")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_garbage_token_returns_401(client, school):
    resp = await client.get("/api/v1/homework", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_unknown_user_returns_401(client, school):
    token = create_access_token(99999, UserRole.admin)
    resp = await client.get("/api/v1/homework", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_role_claim_must_match_stored_role(client, school):
    """A token minted for another role is not honoured."""
    token = create_access_token(school.parent.id, UserRole.admin)
    resp = await client.get("/api/v1/admin/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_deactivated_user_returns_401(client, school, db):
    school.idle_teacher.is_active = False
    await db.flush()
    resp = await client.get("/api/v1/homework", headers=school.auth(school.idle_teacher))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_routes_require_staff(client, school):
    resp = await client.get("/api/v1/admin/users", headers=school.auth(school.legacy_teacher))
    assert resp.status_code == 403
    resp = await client.get("/api/v1/admin/users", headers=school.auth(school.principal))
    assert resp.status_code == 200
