"""Dashboard router — read-only endpoints for dashboard widgets.

All endpoints require authentication. Counts and feeds only ever include
rows the caller is allowed to read.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.dependencies import get_current_identity
from hrdesk.auth.schemas import Identity
from hrdesk.dashboard.schemas import ActivityLogOut, DashboardStatsResponse
from hrdesk.dashboard.service import ACTIVITY_FEED_LIMIT, DashboardService
from hrdesk.database import get_db

router = APIRouter()


# ── GET /stats ──────────────────────────────────────────────────────

@router.get("/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Total employees, pending leaves, active employees."""
    return await DashboardService.get_stats(db, identity.id)


# ── GET /activity ───────────────────────────────────────────────────

@router.get("/activity", response_model=list[ActivityLogOut])
async def activity_feed(
    limit: int = Query(ACTIVITY_FEED_LIMIT, ge=1, le=200),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await DashboardService.get_activity(db, identity.id, limit=limit)
