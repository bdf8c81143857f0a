"""Auth dependencies — provider JWT validation, identity, hook secret."""

from __future__ import annotations

import hmac
import uuid
from typing import Optional

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.schemas import Identity
from hrdesk.auth.service import decode_access_token
from hrdesk.common.constants import CURRENT_USER_SETTING, PROVISIONING_SETTING
from hrdesk.common.exceptions import UnauthorizedException
from hrdesk.config import settings
from hrdesk.database import get_db, set_local


def _extract_bearer(request: Request) -> Optional[str]:
    """Return the Bearer token from the Authorization header, if any."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:]


def _identity_from_token(token: str) -> Identity:
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")

    try:
        identity_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedException("Invalid token subject.")

    return Identity(id=identity_id, email=payload.get("email"))


async def _bind_identity(db: AsyncSession, identity: Identity) -> None:
    await set_local(db, CURRENT_USER_SETTING, str(identity.id))


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_identity(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Validate the provider JWT and return the authenticated identity."""
    token = _extract_bearer(request)
    if token is None:
        raise UnauthorizedException("Missing or invalid Authorization header.")

    identity = _identity_from_token(token)
    await _bind_identity(db, identity)
    request.state.identity = identity
    return identity


async def get_optional_identity(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Identity]:
    """Like :func:`get_current_identity` but absence is not an error."""
    token = _extract_bearer(request)
    if token is None:
        return None
    identity = _identity_from_token(token)
    await _bind_identity(db, identity)
    request.state.identity = identity
    return identity


# ── Auth-provider hook ──────────────────────────────────────────────

async def verify_hook_secret(request: Request) -> None:
    """Only the auth provider, holding the shared secret, may call hooks."""
    supplied = request.headers.get("X-Auth-Hook-Secret", "")
    expected = settings.AUTH_HOOK_SECRET
    if not expected or not hmac.compare_digest(supplied, expected):
        raise UnauthorizedException("Invalid hook secret.")


async def bind_provisioning(db: AsyncSession = Depends(get_db)) -> None:
    """Open the provisioning policies for this transaction.

    A freshly signed-up identity has no session of its own, so the hook
    cannot act as it. Must run after :func:`verify_hook_secret`.
    """
    await set_local(db, PROVISIONING_SETTING, "on")
