"""Auth tests — token verification, role resolution, signup hook, role assignment."""

from __future__ import annotations

import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from hrdesk.auth.models import RoleAssignment
from hrdesk.auth.service import resolve_role, set_role
from hrdesk.common.constants import (
    CURRENT_USER_SETTING,
    PROVISIONING_SETTING,
    AccessLevel,
    AppRole,
)
from hrdesk.common.exceptions import ForbiddenException, NotFoundException
from hrdesk.database import is_postgresql, set_local
from hrdesk.employees.models import ConfidentialRecord, Profile
from tests.conftest import (
    HOOK_HEADERS,
    TestSessionFactory,
    auth_headers,
    create_access_token,
    seed_profile,
)


# ═════════════════════════════════════════════════════════════════════
# Role resolution
# ═════════════════════════════════════════════════════════════════════


class _BrokenSession:
    """Stands in for a session whose store is unreachable."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT role", {}, Exception("connection refused"))


class _FakeResult:
    def __init__(self, rows):
        self._rows = rows

    def scalars(self):
        scalars = MagicMock()
        scalars.all.return_value = self._rows
        return scalars


class _MultiRoleSession:
    async def execute(self, *args, **kwargs):
        return _FakeResult([AppRole.admin, AppRole.user])


class TestResolveRole:

    async def test_no_identity_is_unauthenticated(self, db):
        resolved = await resolve_role(db, None)
        assert resolved.role is None
        assert resolved.access_level == AccessLevel.unauthenticated
        assert resolved.is_admin is False

    async def test_single_admin_row(self, db, admin):
        resolved = await resolve_role(db, admin.id)
        assert resolved.role == AppRole.admin
        assert resolved.is_admin is True
        assert resolved.access_level == AccessLevel.authenticated

    async def test_single_user_row(self, db, employee):
        resolved = await resolve_role(db, employee.id)
        assert resolved.role == AppRole.user
        assert resolved.is_admin is False

    async def test_no_row_defaults_to_user(self, db):
        orphan = await seed_profile(db, role=None)
        resolved = await resolve_role(db, orphan.id)
        assert resolved.role == AppRole.user
        assert resolved.is_admin is False

    async def test_unknown_identity_defaults_to_user(self, db):
        resolved = await resolve_role(db, uuid.uuid4())
        assert resolved.role == AppRole.user

    async def test_store_failure_defaults_to_user(self, caplog):
        resolved = await resolve_role(_BrokenSession(), uuid.uuid4())
        assert resolved.role == AppRole.user
        assert resolved.is_admin is False
        assert "Error fetching role" in caplog.text

    async def test_multiple_rows_never_grant_admin(self):
        resolved = await resolve_role(_MultiRoleSession(), uuid.uuid4())
        assert resolved.role == AppRole.user
        assert resolved.is_admin is False


# ═════════════════════════════════════════════════════════════════════
# Token verification (API)
# ═════════════════════════════════════════════════════════════════════


async def test_role_endpoint_without_token(client):
    resp = await client.get("/api/v1/auth/role")
    assert resp.status_code == 200
    data = resp.json()
    assert data["role"] is None
    assert data["access_level"] == "unauthenticated"


async def test_role_endpoint_for_admin(client, admin):
    resp = await client.get("/api/v1/auth/role", headers=auth_headers(admin.id))
    assert resp.status_code == 200
    assert resp.json() == {"role": "admin", "access_level": "authenticated", "is_admin": True}


async def test_me_returns_profile_and_role(client, employee):
    resp = await client.get("/api/v1/auth/me", headers=auth_headers(employee.id))
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == str(employee.id)
    assert data["name"] == "Eve Employee"
    assert data["email"] == "eve@example.com"
    assert data["role"] == "user"
    assert data["is_admin"] is False


async def test_me_requires_token(client):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401


async def test_expired_token_rejected(client, employee):
    token = create_access_token(employee.id, expired=True)
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired."


async def test_wrong_audience_rejected(client, employee):
    token = create_access_token(employee.id, audience="somebody-else")
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_tampered_token_rejected(client, employee):
    token = create_access_token(employee.id) + "x"
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_roles_listing_is_scoped(client, admin, employee):
    own = await client.get("/api/v1/auth/roles", headers=auth_headers(employee.id))
    assert own.status_code == 200
    assert [r["user_id"] for r in own.json()] == [str(employee.id)]

    everyone = await client.get("/api/v1/auth/roles", headers=auth_headers(admin.id))
    assert {r["user_id"] for r in everyone.json()} == {str(admin.id), str(employee.id)}


# ═════════════════════════════════════════════════════════════════════
# Signup hook
# ═════════════════════════════════════════════════════════════════════


async def test_signup_hook_provisions_defaults(client):
    identity_id = uuid.uuid4()
    resp = await client.post(
        "/api/v1/auth/signup-hook",
        json={"id": str(identity_id), "email": "new@example.com"},
        headers=HOOK_HEADERS,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["role"] == "user"
    assert body["confidential_record_created"] is False

    async with TestSessionFactory() as session:
        profile = await session.get(Profile, identity_id)
        assert profile.name == "New User"
        assert profile.hire_date is not None
        roles = (await session.execute(
            select(RoleAssignment.role).where(RoleAssignment.user_id == identity_id)
        )).scalars().all()
        assert roles == [AppRole.user]


async def test_signup_hook_with_position_creates_confidential_record(client):
    identity_id = uuid.uuid4()
    resp = await client.post(
        "/api/v1/auth/signup-hook",
        json={
            "id": str(identity_id),
            "email": "pos@example.com",
            "user_metadata": {
                "name": "Pat Position",
                "department": "Sales",
                "hire_date": "2025-03-01",
                "position": "Account Executive",
            },
        },
        headers=HOOK_HEADERS,
    )
    assert resp.status_code == 201
    assert resp.json()["confidential_record_created"] is True

    async with TestSessionFactory() as session:
        profile = await session.get(Profile, identity_id)
        assert profile.name == "Pat Position"
        assert profile.department == "Sales"
        assert profile.hire_date.isoformat() == "2025-03-01"
        record = (await session.execute(
            select(ConfidentialRecord).where(ConfidentialRecord.user_id == identity_id)
        )).scalars().one()
        assert record.position == "Account Executive"


async def test_signup_hook_twice_is_conflict(client):
    payload = {"id": str(uuid.uuid4()), "email": "twice@example.com"}
    first = await client.post("/api/v1/auth/signup-hook", json=payload, headers=HOOK_HEADERS)
    assert first.status_code == 201
    second = await client.post("/api/v1/auth/signup-hook", json=payload, headers=HOOK_HEADERS)
    assert second.status_code == 409
    assert second.headers["content-type"].startswith("application/problem+json")


async def test_signup_hook_requires_secret(client):
    resp = await client.post(
        "/api/v1/auth/signup-hook",
        json={"id": str(uuid.uuid4()), "email": "nosecret@example.com"},
        headers={"X-Auth-Hook-Secret": "wrong"},
    )
    assert resp.status_code == 401


# ═════════════════════════════════════════════════════════════════════
# Row-policy context — what each route publishes to PostgreSQL
# ═════════════════════════════════════════════════════════════════════


class _PostgresSession:
    """Stands in for a session bound to a PostgreSQL engine."""

    def __init__(self):
        self.bind = MagicMock()
        self.bind.dialect.name = "postgresql"
        self.executed = []

    async def execute(self, statement, params=None):
        self.executed.append((str(statement), params))


class TestRowPolicyContext:

    @pytest.fixture
    def bound(self, monkeypatch):
        calls = []

        async def _record(db, name, value):
            calls.append((name, value))

        monkeypatch.setattr("hrdesk.auth.dependencies.set_local", _record)
        return calls

    async def test_set_local_is_transaction_scoped(self):
        session = _PostgresSession()
        await set_local(session, CURRENT_USER_SETTING, "abc")
        assert session.executed == [
            (
                "SELECT set_config(:name, :value, true)",
                {"name": "app.current_user_id", "value": "abc"},
            )
        ]

    async def test_set_local_skips_other_backends(self, db):
        assert is_postgresql(db) is False
        await set_local(db, CURRENT_USER_SETTING, "abc")

    async def test_protected_route_binds_caller(self, client, employee, bound):
        resp = await client.get("/api/v1/auth/me", headers=auth_headers(employee.id))
        assert resp.status_code == 200
        assert bound == [(CURRENT_USER_SETTING, str(employee.id))]

    async def test_role_lookup_binds_caller(self, client, admin, bound):
        resp = await client.get("/api/v1/auth/role", headers=auth_headers(admin.id))
        assert resp.json()["role"] == "admin"
        assert bound == [(CURRENT_USER_SETTING, str(admin.id))]

    async def test_anonymous_role_lookup_binds_nothing(self, client, bound):
        resp = await client.get("/api/v1/auth/role")
        assert resp.status_code == 200
        assert bound == []

    async def test_signup_hook_opens_provisioning(self, client, bound):
        resp = await client.post(
            "/api/v1/auth/signup-hook",
            json={"id": str(uuid.uuid4()), "email": "fresh@example.com"},
            headers=HOOK_HEADERS,
        )
        assert resp.status_code == 201
        assert bound == [(PROVISIONING_SETTING, "on")]

    async def test_rejected_hook_opens_nothing(self, client, bound):
        resp = await client.post(
            "/api/v1/auth/signup-hook",
            json={"id": str(uuid.uuid4()), "email": "fresh@example.com"},
            headers={"X-Auth-Hook-Secret": "wrong"},
        )
        assert resp.status_code == 401
        assert bound == []


# ═════════════════════════════════════════════════════════════════════
# Role assignment
# ═════════════════════════════════════════════════════════════════════


class TestSetRole:

    async def test_admin_promotes_user(self, db, admin, employee):
        assignment = await set_role(db, admin.id, employee.id, AppRole.admin)
        await db.commit()
        assert assignment.role == AppRole.admin

        resolved = await resolve_role(db, employee.id)
        assert resolved.is_admin is True

    async def test_admin_creates_missing_row(self, db, admin):
        orphan = await seed_profile(db, role=None)
        assignment = await set_role(db, admin.id, orphan.id, AppRole.user)
        assert assignment.user_id == orphan.id

    async def test_non_admin_forbidden(self, db, employee):
        other = await seed_profile(db)
        with pytest.raises(ForbiddenException):
            await set_role(db, employee.id, other.id, AppRole.admin)

    async def test_unknown_employee(self, db, admin):
        with pytest.raises(NotFoundException):
            await set_role(db, admin.id, uuid.uuid4(), AppRole.admin)


async def test_role_endpoint_reflects_demotion(client, admin):
    async with TestSessionFactory() as session:
        other_admin = await seed_profile(session, name="Bo Admin", role=AppRole.admin)

    headers = auth_headers(other_admin.id)
    before = await client.get("/api/v1/auth/role", headers=headers)
    assert before.json()["role"] == "admin"

    resp = await client.put(
        f"/api/v1/employees/{other_admin.id}/role",
        json={"role": "user"},
        headers=auth_headers(admin.id),
    )
    assert resp.status_code == 200

    after = await client.get("/api/v1/auth/role", headers=headers)
    assert after.json()["role"] == "user"
