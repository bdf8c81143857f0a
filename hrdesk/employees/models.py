"""Employee ORM models: Profile, ConfidentialRecord."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hrdesk.common.audit import TimestampMixin
from hrdesk.database import Base


class Profile(Base, TimestampMixin):
    """One per identity. ``id`` is the identity UUID issued by the auth provider."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    email: Mapped[str] = mapped_column(sa.Text, unique=True, nullable=False)
    department: Mapped[Optional[str]] = mapped_column(sa.Text)
    hire_date: Mapped[Optional[date]] = mapped_column(sa.Date)

    def __repr__(self) -> str:
        return f"<Profile {self.email}>"


class ConfidentialRecord(Base, TimestampMixin):
    """Admin-only employee data kept apart from the profile row."""

    __tablename__ = "admin_data"

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
    position: Mapped[Optional[str]] = mapped_column(sa.Text)
    salary: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2))
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)

    __table_args__ = (
        sa.Index("idx_admin_data_user_id", "user_id"),
    )
