"""Dashboard service — counts and activity feed under the viewer's policies."""

from __future__ import annotations

import uuid
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.policies import is_admin, owned_or_all
from hrdesk.common.audit import ActivityLog
from hrdesk.common.constants import LeaveStatus
from hrdesk.dashboard.schemas import DashboardStatsResponse
from hrdesk.employees.models import Profile
from hrdesk.leave.models import LeaveRequest

ACTIVITY_FEED_LIMIT = 50


class DashboardService:

    @staticmethod
    async def get_stats(
        db: AsyncSession,
        viewer_id: uuid.UUID,
    ) -> DashboardStatsResponse:
        admin = await is_admin(db, viewer_id)

        employees_q = owned_or_all(
            select(func.count()).select_from(Profile), Profile.id, viewer_id, admin=admin,
        )
        total = (await db.execute(employees_q)).scalar_one()

        pending_q = owned_or_all(
            select(func.count())
            .select_from(LeaveRequest)
            .where(LeaveRequest.status == LeaveStatus.pending),
            LeaveRequest.user_id,
            viewer_id,
            admin=admin,
        )
        pending = (await db.execute(pending_q)).scalar_one()

        # No separate "inactive" state exists, so active == total.
        return DashboardStatsResponse(
            total_employees=total,
            pending_leaves=pending,
            active_employees=total,
        )

    @staticmethod
    async def get_activity(
        db: AsyncSession,
        viewer_id: uuid.UUID,
        *,
        limit: int = ACTIVITY_FEED_LIMIT,
    ) -> Sequence[ActivityLog]:
        admin = await is_admin(db, viewer_id)
        query = owned_or_all(
            select(ActivityLog).order_by(ActivityLog.created_at.desc()),
            ActivityLog.user_id,
            viewer_id,
            admin=admin,
        )
        result = await db.execute(query.limit(limit))
        return result.scalars().all()
