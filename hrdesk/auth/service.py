"""Auth service — token verification, role resolution, identity provisioning."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Optional, Sequence

from jose import jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.models import RoleAssignment
from hrdesk.auth.policies import require_admin, scope_to_viewer
from hrdesk.auth.schemas import (
    Identity,
    MeResponse,
    ResolvedRole,
    SignupHookRequest,
    SignupHookResponse,
)
from hrdesk.common.constants import DEFAULT_PROFILE_NAME, AccessLevel, AppRole
from hrdesk.common.exceptions import ConflictError, NotFoundException
from hrdesk.config import settings
from hrdesk.employees.models import ConfidentialRecord, Profile

logger = logging.getLogger(__name__)


# ── Tokens ──────────────────────────────────────────────────────────

def decode_access_token(token: str) -> dict[str, Any]:
    """Verify a provider-issued JWT and return its claims.

    Raises ``jose.JWTError`` (or a subclass) on any signature, expiry or
    audience failure.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )


# ── Role resolution ─────────────────────────────────────────────────

async def resolve_role(
    db: AsyncSession,
    identity_id: Optional[uuid.UUID],
) -> ResolvedRole:
    """Resolve the role to show in the UI for *identity_id*.

    * no identity          → no role, unauthenticated
    * exactly one row      → that row's role
    * no row, or a failure → ``user`` (never ``admin``)
    """
    if identity_id is None:
        return ResolvedRole(role=None, access_level=AccessLevel.unauthenticated)

    role = AppRole.user
    try:
        result = await db.execute(
            select(RoleAssignment.role).where(RoleAssignment.user_id == identity_id)
        )
        rows = result.scalars().all()
    except SQLAlchemyError:
        logger.exception("Error fetching role for %s", identity_id)
    else:
        if len(rows) == 1:
            role = rows[0]
        elif len(rows) > 1:
            logger.error("Identity %s has %d role rows; using 'user'", identity_id, len(rows))

    return ResolvedRole(
        role=role,
        access_level=AccessLevel.authenticated,
        is_admin=role == AppRole.admin,
    )


async def get_me(db: AsyncSession, identity: Identity) -> MeResponse:
    resolved = await resolve_role(db, identity.id)
    profile = await db.get(Profile, identity.id)
    return MeResponse(
        id=identity.id,
        email=profile.email if profile else identity.email,
        name=profile.name if profile else None,
        role=resolved.role,
        is_admin=resolved.is_admin,
    )


# ── Role assignments ────────────────────────────────────────────────

async def list_roles(
    db: AsyncSession,
    viewer_id: uuid.UUID,
) -> Sequence[RoleAssignment]:
    query = select(RoleAssignment).order_by(RoleAssignment.created_at)
    query = await scope_to_viewer(db, query, RoleAssignment.user_id, viewer_id)
    result = await db.execute(query)
    return result.scalars().all()


async def set_role(
    db: AsyncSession,
    actor_id: uuid.UUID,
    user_id: uuid.UUID,
    role: AppRole,
) -> RoleAssignment:
    """Give *user_id* exactly one role, creating the row if absent."""
    await require_admin(db, actor_id, "assign roles")

    if await db.get(Profile, user_id) is None:
        raise NotFoundException("Employee", user_id)

    result = await db.execute(
        select(RoleAssignment).where(RoleAssignment.user_id == user_id)
    )
    assignment = result.scalars().first()
    if assignment is None:
        assignment = RoleAssignment(user_id=user_id, role=role)
        db.add(assignment)
    else:
        assignment.role = role
    await db.flush()

    logger.info("Role of %s set to %s by %s", user_id, role.value, actor_id)
    return assignment


# ── Provisioning (signup hook) ──────────────────────────────────────

async def provision_identity(
    db: AsyncSession,
    data: SignupHookRequest,
) -> SignupHookResponse:
    """Create the profile, default role and optional confidential record
    for a freshly signed-up identity. Runs once per identity."""

    if await db.get(Profile, data.id) is not None:
        raise ConflictError("id", data.id)

    existing = await db.execute(select(Profile.id).where(Profile.email == data.email))
    if existing.first() is not None:
        raise ConflictError("email", data.email)

    meta = data.user_metadata
    db.add(
        Profile(
            id=data.id,
            name=meta.name or DEFAULT_PROFILE_NAME,
            email=data.email,
            department=meta.department,
            hire_date=meta.hire_date or date.today(),
        )
    )
    await db.flush()

    db.add(RoleAssignment(user_id=data.id, role=AppRole.user))

    created_confidential = meta.position is not None
    if created_confidential:
        db.add(ConfidentialRecord(user_id=data.id, position=meta.position))
    await db.flush()

    logger.info("Provisioned identity %s (%s)", data.id, data.email)
    return SignupHookResponse(
        id=data.id,
        role=AppRole.user,
        confidential_record_created=created_confidential,
    )
