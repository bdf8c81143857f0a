"""Attendance service layer — admin clock in/out and record reads.

Business logic:
  - Only admins create records (for any employee) and close them
  - A record closes once; clock-out may not precede clock-in
  - Duration is shown in hours rounded half-up to one decimal
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.attendance.models import AttendanceRecord
from hrdesk.attendance.schemas import AttendanceRecordOut, ClockInRequest
from hrdesk.auth.policies import require_admin, require_admin_for_row, scope_to_viewer
from hrdesk.common.constants import SECONDS_PER_HOUR
from hrdesk.common.exceptions import NotFoundException, ValidationException
from hrdesk.database import get_for_update
from hrdesk.employees.models import Profile

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps (as some drivers return them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def calculate_duration_hours(
    clock_in: datetime,
    clock_out: Optional[datetime],
) -> Optional[float]:
    """Hours between clock-in and clock-out, one decimal; ``None`` while open."""
    if clock_out is None:
        return None
    seconds = (_as_utc(clock_out) - _as_utc(clock_in)).total_seconds()
    hours = (Decimal(str(seconds)) / Decimal(SECONDS_PER_HOUR)).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP,
    )
    return float(hours)


class AttendanceService:
    """Async attendance operations: clock in/out, read, delete."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _build_response(
        record: AttendanceRecord,
        profile: Optional[Profile] = None,
    ) -> AttendanceRecordOut:
        out = AttendanceRecordOut.model_validate(record)
        out.duration_hours = calculate_duration_hours(record.clock_in, record.clock_out)
        if profile is not None:
            out.employee_name = profile.name
            out.employee_email = profile.email
        return out

    # ── Clock in ────────────────────────────────────────────────────

    @staticmethod
    async def clock_in(
        db: AsyncSession,
        admin_id: uuid.UUID,
        data: ClockInRequest,
    ) -> AttendanceRecordOut:
        """Open a record for ``data.user_id`` stamped now, marked by *admin_id*."""
        await require_admin(db, admin_id, "mark attendance")

        profile = await db.get(Profile, data.user_id)
        if profile is None:
            raise NotFoundException("Employee", data.user_id)

        record = AttendanceRecord(
            user_id=data.user_id,
            clock_in=datetime.now(timezone.utc),
            notes=data.notes or None,
            marked_by=admin_id,
        )
        db.add(record)
        await db.flush()

        logger.info("Clock-in %s for %s by %s", record.id, data.user_id, admin_id)
        return AttendanceService._build_response(record, profile)

    # ── Clock out ───────────────────────────────────────────────────

    @staticmethod
    async def clock_out(
        db: AsyncSession,
        admin_id: uuid.UUID,
        record_id: uuid.UUID,
        *,
        at: Optional[datetime] = None,
    ) -> AttendanceRecordOut:
        """Close an open record. Settable once, never before clock-in."""
        await require_admin_for_row(db, admin_id, "AttendanceRecord", record_id)

        record = await get_for_update(db, AttendanceRecord, record_id)
        if record is None:
            raise NotFoundException("AttendanceRecord", record_id)

        if not record.is_open:
            raise ValidationException(
                {"clock_out": ["Clock-out has already been recorded."]}
            )

        clock_out = _as_utc(at) if at is not None else datetime.now(timezone.utc)
        if clock_out < _as_utc(record.clock_in):
            raise ValidationException(
                {"clock_out": ["Clock-out cannot be earlier than clock-in."]}
            )

        record.clock_out = clock_out
        await db.flush()

        profile = await db.get(Profile, record.user_id)
        return AttendanceService._build_response(record, profile)

    # ── Read ────────────────────────────────────────────────────────

    @staticmethod
    async def get_records(
        db: AsyncSession,
        viewer_id: uuid.UUID,
        *,
        user_id: Optional[uuid.UUID] = None,
    ) -> list[AttendanceRecordOut]:
        """Own records, or everyone's for admins; newest clock-in first."""
        query = (
            select(AttendanceRecord, Profile)
            .join(Profile, Profile.id == AttendanceRecord.user_id)
            .order_by(AttendanceRecord.clock_in.desc())
        )
        if user_id is not None:
            query = query.where(AttendanceRecord.user_id == user_id)
        query = await scope_to_viewer(db, query, AttendanceRecord.user_id, viewer_id)

        result = await db.execute(query)
        return [
            AttendanceService._build_response(record, profile)
            for record, profile in result.all()
        ]

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_record(
        db: AsyncSession,
        admin_id: uuid.UUID,
        record_id: uuid.UUID,
    ) -> None:
        await require_admin_for_row(db, admin_id, "AttendanceRecord", record_id)
        record = await db.get(AttendanceRecord, record_id)
        if record is None:
            raise NotFoundException("AttendanceRecord", record_id)
        await db.delete(record)
        await db.flush()
