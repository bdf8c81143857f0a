"""Auth router — current identity, role resolution, signup hook."""


from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.dependencies import (
    bind_provisioning,
    get_current_identity,
    get_optional_identity,
    verify_hook_secret,
)
from hrdesk.auth.schemas import (
    Identity,
    MeResponse,
    ResolvedRole,
    RoleAssignmentOut,
    SignupHookRequest,
    SignupHookResponse,
)
from hrdesk.auth.service import get_me, list_roles, provision_identity, resolve_role
from hrdesk.common.rate_limit import SIGNUP_HOOK_LIMIT, limiter
from hrdesk.database import get_db

router = APIRouter(prefix="", tags=["auth"])


# ── GET /me — Current identity with profile name and role ──────────

@router.get("/me", response_model=MeResponse)
async def me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await get_me(db, identity)


# ── GET /role — Role for UI affordances ────────────────────────────

@router.get("/role", response_model=ResolvedRole)
async def current_role(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db),
):
    """Resolve the caller's role. Clients re-fetch this on window focus."""
    return await resolve_role(db, identity.id if identity else None)


# ── GET /roles — Visible role assignments ──────────────────────────

@router.get("/roles", response_model=list[RoleAssignmentOut])
async def roles(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Own role row, or every row for admins."""
    return await list_roles(db, identity.id)


# ── POST /signup-hook — Provision a new identity ───────────────────

@router.post(
    "/signup-hook",
    response_model=SignupHookResponse,
    status_code=201,
    dependencies=[Depends(verify_hook_secret), Depends(bind_provisioning)],
)
@limiter.limit(SIGNUP_HOOK_LIMIT)
async def signup_hook(
    request: Request,
    body: SignupHookRequest,
    db: AsyncSession = Depends(get_db),
):
    """Called by the auth provider after it creates an identity."""
    return await provision_identity(db, body)
