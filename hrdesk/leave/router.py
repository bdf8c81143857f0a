"""Leave router — request, list, approve/reject, delete.

All endpoints require authentication. Review and delete are re-checked
against the caller's role on every call.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.dependencies import get_current_identity
from hrdesk.auth.schemas import Identity
from hrdesk.common.constants import LeaveStatus
from hrdesk.database import get_db
from hrdesk.leave.schemas import (
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveReviewRequest,
)
from hrdesk.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=201)
async def apply_leave(
    body: LeaveRequestCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Request leave for yourself."""
    return await LeaveService.apply_leave(db, identity.id, body)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[LeaveRequestOut])
async def list_leaves(
    status: Optional[LeaveStatus] = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Own leave requests; admins see everyone's."""
    return await LeaveService.get_leaves(db, identity.id, status=status)


# ── PUT /{id}/review ────────────────────────────────────────────────

@router.put("/{request_id}/review", response_model=LeaveRequestOut)
async def review_leave(
    request_id: uuid.UUID,
    body: LeaveReviewRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending request (admin)."""
    return await LeaveService.review_leave(db, identity.id, request_id, body)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{request_id}", status_code=204)
async def delete_leave(
    request_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await LeaveService.delete_leave(db, identity.id, request_id)
