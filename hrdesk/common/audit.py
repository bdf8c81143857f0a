"""Timestamp mixin, append-only activity log model, and async helper."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from hrdesk.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Mixin for any timestamped model ─────────────────────────────────

class TimestampMixin:
    """
    Add ``created_at`` and ``updated_at`` to any SQLAlchemy model via::

        class Profile(Base, TimestampMixin):
            ...

    ``updated_at`` is refreshed on every ORM update.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


# ── Append-only activity log ────────────────────────────────────────

class ActivityLog(Base):
    """What a user did, in their own words. Rows are never updated."""

    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("idx_activity_logs_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog {self.action} by {self.user_id}>"


# ── Helper to create an entry ───────────────────────────────────────

async def log_activity(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    action: str,
    description: Optional[str] = None,
) -> ActivityLog:
    """
    Append and flush an activity-log entry for *user_id*.

    Callers pass the authenticated identity; entries are only ever written
    on the actor's own behalf.
    """
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        description=description,
    )
    session.add(entry)
    await session.flush()
    return entry
