"""Auth ORM models: RoleAssignment."""

from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hrdesk.common.audit import utcnow
from hrdesk.common.constants import AppRole
from hrdesk.database import Base


class RoleAssignment(Base):
    """The single source of truth for an identity's role.

    ``user_id`` is unique: an identity holds at most one role.
    """

    __tablename__ = "user_roles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    role: Mapped[AppRole] = mapped_column(
        sa.Enum(AppRole, name="app_role"),
        nullable=False,
        default=AppRole.user,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        sa.Index("idx_user_roles_user_id", "user_id"),
    )
