"""Session context and the client-side role cache.

The role cached here only decides which affordances a view shows. The
server checks every read and write against its own policies, so a stale or
wrong cached role can hide a button but never grant access.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from hrdesk.client.api import APIError, HRDeskClient
from hrdesk.common.constants import AppRole

logger = logging.getLogger(__name__)


class RoleResolver:
    """Resolves and caches the role of the session's current identity."""

    def __init__(self, session: "SessionContext") -> None:
        self._session = session
        self._role: Optional[AppRole] = None
        self._resolved = False

    @property
    def cached(self) -> Optional[AppRole]:
        return self._role

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    def invalidate(self) -> None:
        self._role = None
        self._resolved = False

    async def get(self) -> Optional[AppRole]:
        if not self._resolved:
            self._role = await self._fetch()
            self._resolved = True
        return self._role

    async def refresh(self) -> Optional[AppRole]:
        self.invalidate()
        return await self.get()

    async def _fetch(self) -> Optional[AppRole]:
        if not self._session.is_authenticated:
            return None

        try:
            data = await self._session.client.get_role()
        except APIError as exc:
            logger.warning(
                "Role lookup failed for %s (%s), treating as user",
                self._session.identity_id, exc.detail,
            )
            return AppRole.user

        try:
            return AppRole(data.get("role") or AppRole.user)
        except (AttributeError, ValueError):
            logger.warning("Unexpected role payload %r, treating as user", data)
            return AppRole.user


class SessionContext:
    """One signed-in (or anonymous) user of a client UI.

    Owns the API client and the role cache. Views receive the session
    explicitly; nothing here is a module-level singleton.
    """

    def __init__(
        self,
        client: HRDeskClient,
        identity_id: Optional[uuid.UUID] = None,
    ) -> None:
        self.client = client
        self.identity_id = identity_id
        self.roles = RoleResolver(self)

    @property
    def token(self) -> Optional[str]:
        return self.client.token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.client.token)

    def set_identity(
        self,
        token: Optional[str],
        identity_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Switch to another identity (sign in, sign out, token swap)."""
        self.client.set_token(token)
        self.identity_id = identity_id if token else None
        self.roles.invalidate()

    async def role(self) -> Optional[AppRole]:
        return await self.roles.get()

    async def is_admin(self) -> bool:
        return await self.roles.get() == AppRole.admin

    async def on_focus(self) -> Optional[AppRole]:
        """Window regained focus: pick up role changes made elsewhere."""
        return await self.roles.refresh()

    async def aclose(self) -> None:
        await self.client.aclose()
