"""Attendance ORM models: AttendanceRecord."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hrdesk.common.audit import TimestampMixin, utcnow
from hrdesk.database import Base


class AttendanceRecord(Base, TimestampMixin):
    """One clock-in, optionally closed by one clock-out."""

    __tablename__ = "attendance"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    clock_in: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
    clock_out: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    # NULL once the marking admin's profile is deleted
    marked_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="SET NULL"),
    )

    __table_args__ = (
        sa.Index("idx_attendance_user_id", "user_id"),
    )

    @property
    def is_open(self) -> bool:
        return self.clock_out is None
