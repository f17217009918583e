"""
Authorization gate: ordered checks in front of every protected route.
"""
import uuid
from datetime import timedelta

import pytest

from school_admin.core.permissions import Role
from school_admin.core.security import TokenService, create_access_token, token_service

pytestmark = pytest.mark.anyio


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def test_missing_token(client):
    r = await client.get("/v1/user/me")
    assert r.status_code == 401
    assert r.json()["error"] == "UNAUTHENTICATED"
    assert r.headers.get("WWW-Authenticate") == "Bearer"


async def test_non_bearer_scheme(client):
    r = await client.get("/v1/user/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert r.status_code == 401


async def test_malformed_token(client):
    r = await client.get("/v1/user/me", headers=_bearer("garbage"))
    assert r.status_code == 401
    assert r.json()["error"] == "INVALID_TOKEN"


async def test_expired_token(client, make_user):
    user = make_user(Role.SUPER_ADMIN)
    token = token_service.issue({"sub": str(user.id)}, expires_delta=timedelta(seconds=-5))
    r = await client.get("/v1/user/me", headers=_bearer(token))
    assert r.status_code == 401
    assert r.json()["error"] == "EXPIRED_TOKEN"


async def test_bad_signature(client, make_user):
    user = make_user(Role.SUPER_ADMIN)
    token = TokenService(secret="not-the-server-secret").issue({"sub": str(user.id)})
    r = await client.get("/v1/user/me", headers=_bearer(token))
    assert r.status_code == 401
    assert r.json()["error"] == "BAD_SIGNATURE"


async def test_token_without_subject(client):
    r = await client.get("/v1/user/me", headers=_bearer(create_access_token({"role": "SUPER_ADMIN"})))
    assert r.status_code == 401
    assert r.json()["error"] == "INVALID_TOKEN"


async def test_unknown_principal(client):
    token = create_access_token({"sub": str(uuid.uuid4())})
    r = await client.get("/v1/user/me", headers=_bearer(token))
    assert r.status_code == 404


async def test_deleted_principal(client, db, make_institute, make_user, auth_headers):
    user = make_user(Role.TEACHER, make_institute())
    user.is_deleted = True
    db.commit()
    r = await client.get("/v1/user/me", headers=auth_headers(user))
    assert r.status_code == 410


async def test_inactive_principal(client, db, make_institute, make_user, auth_headers):
    user = make_user(Role.TEACHER, make_institute())
    user.is_active = False
    db.commit()
    r = await client.get("/v1/user/me", headers=auth_headers(user))
    assert r.status_code == 403


async def test_missing_capability(client, make_institute, make_user, auth_headers):
    teacher = make_user(Role.TEACHER, make_institute())
    r = await client.post(
        "/v1/academic-session/create",
        json={"name": "2024-2025", "start_date": "2024-04-01", "end_date": "2025-03-31"},
        headers=auth_headers(teacher),
    )
    assert r.status_code == 403
    assert r.json()["error"] == "FORBIDDEN"


async def test_identity_state_checked_before_capability(client, db, make_institute, make_user, auth_headers):
    teacher = make_user(Role.TEACHER, make_institute())
    teacher.is_active = False
    db.commit()
    # lacks the capability too, but the inactive account is reported first
    r = await client.post("/v1/institute-class/create", json={}, headers=auth_headers(teacher))
    assert r.status_code == 403
    assert r.json()["detail"] == "User account is inactive"


async def test_authenticated_request_sees_its_own_identity(client, make_institute, make_user, auth_headers):
    institute = make_institute()
    admin = make_user(Role.INSTITUTE_ADMIN, institute)
    r = await client.get("/v1/user/me", headers=auth_headers(admin))
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == str(admin.id)
    assert body["institute_id"] == str(institute.id)
    assert "password_hash" not in body


async def test_tenant_comes_from_token_holder(client, make_institute, make_user, auth_headers):
    mine, other = make_institute(), make_institute()
    admin = make_user(Role.INSTITUTE_ADMIN, mine)
    make_user(Role.TEACHER, other)
    make_user(Role.TEACHER, mine)

    r = await client.get("/v1/user/get-all-users", params={"role": "TEACHER"}, headers=auth_headers(admin))
    assert r.status_code == 200
    items = r.json()["items"]
    assert len(items) == 1
    assert items[0]["institute_id"] == str(mine.id)
