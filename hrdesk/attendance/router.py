"""Attendance router — admin clock in/out, record listing."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.attendance.schemas import (
    AttendanceRecordOut,
    ClockInRequest,
    ClockOutRequest,
)
from hrdesk.attendance.service import AttendanceService
from hrdesk.auth.dependencies import get_current_identity
from hrdesk.auth.schemas import Identity
from hrdesk.database import get_db

router = APIRouter()


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[AttendanceRecordOut])
async def list_attendance(
    user_id: Optional[uuid.UUID] = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Own records; admins see everyone's and may filter by employee."""
    return await AttendanceService.get_records(db, identity.id, user_id=user_id)


# ── POST /clock-in ──────────────────────────────────────────────────

@router.post("/clock-in", response_model=AttendanceRecordOut, status_code=201)
async def clock_in(
    body: ClockInRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.clock_in(db, identity.id, body)


# ── PUT /{id}/clock-out ─────────────────────────────────────────────

@router.put("/{record_id}/clock-out", response_model=AttendanceRecordOut)
async def clock_out(
    record_id: uuid.UUID,
    body: ClockOutRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.clock_out(
        db, identity.id, record_id, at=body.clock_out,
    )


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{record_id}", status_code=204)
async def delete_record(
    record_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await AttendanceService.delete_record(db, identity.id, record_id)
