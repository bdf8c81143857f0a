"""Row-level access policies — the only trusted authorization checks.

Every service routes reads and writes through these helpers. They consult
``user_roles`` directly on each call and never look at what the client
believes its role to be.

Collection      Read              Create            Update            Delete
──────────────  ────────────────  ────────────────  ────────────────  ──────
profiles        self | admin      signup hook       self | admin      admin
user_roles      self | admin      admin             admin             admin
admin_data      admin             admin             admin             admin
leaves          self | admin      self              admin             admin
attendance      self | admin      admin             admin             admin
activity_logs   self | admin      self              —                 —
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.models import RoleAssignment
from hrdesk.common.constants import AppRole
from hrdesk.common.exceptions import ForbiddenException, NotFoundException

logger = logging.getLogger(__name__)


async def has_role(
    db: AsyncSession,
    identity_id: Optional[uuid.UUID],
    role: AppRole,
) -> bool:
    """True iff a ``user_roles`` row grants *role* to *identity_id*.

    A missing row is never privilege. Store errors propagate to the caller.
    """
    if identity_id is None:
        return False
    result = await db.execute(
        select(RoleAssignment.id)
        .where(
            RoleAssignment.user_id == identity_id,
            RoleAssignment.role == role,
        )
        .limit(1)
    )
    return result.first() is not None


async def is_admin(db: AsyncSession, identity_id: Optional[uuid.UUID]) -> bool:
    return await has_role(db, identity_id, AppRole.admin)


def owned_or_all(
    query: Select,
    owner_column: Any,
    viewer_id: uuid.UUID,
    *,
    admin: bool,
) -> Select:
    """Restrict *query* to the viewer's own rows unless *admin*."""
    if admin:
        return query
    return query.where(owner_column == viewer_id)


async def scope_to_viewer(
    db: AsyncSession,
    query: Select,
    owner_column: Any,
    viewer_id: uuid.UUID,
) -> Select:
    """Apply the ``self | admin`` read policy to *query*."""
    admin = await is_admin(db, viewer_id)
    return owned_or_all(query, owner_column, viewer_id, admin=admin)


async def require_admin(
    db: AsyncSession,
    identity_id: uuid.UUID,
    action: str,
) -> None:
    """Collection-level gate (creates that target no existing row)."""
    if not await is_admin(db, identity_id):
        logger.warning("Denied %s for non-admin %s", action, identity_id)
        raise ForbiddenException(f"Only admins can {action}.")


async def require_admin_for_row(
    db: AsyncSession,
    identity_id: uuid.UUID,
    entity_type: str,
    entity_id: Any,
) -> None:
    """Row-level gate. Denial looks exactly like a missing row."""
    if not await is_admin(db, identity_id):
        logger.warning(
            "Denied write on %s %s for non-admin %s",
            entity_type, entity_id, identity_id,
        )
        raise NotFoundException(entity_type, entity_id)
