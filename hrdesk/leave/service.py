"""Leave service layer — request, review, list.

Business logic:
  - Requests are always filed for the caller's own identity
  - pending → approved | rejected, performed by admins only
  - Reviewer and review time are stamped together with the status change
  - Each submission appends an activity-log entry for the requester
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.policies import require_admin_for_row, scope_to_viewer
from hrdesk.common.audit import log_activity
from hrdesk.common.constants import (
    ACTIVITY_LEAVE_REQUEST,
    LEAVE_TRANSITIONS,
    LeaveStatus,
)
from hrdesk.common.exceptions import NotFoundException, ValidationException
from hrdesk.database import get_for_update
from hrdesk.employees.models import Profile
from hrdesk.leave.models import LeaveRequest
from hrdesk.leave.schemas import (
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveReviewRequest,
)

logger = logging.getLogger(__name__)


class LeaveService:
    """Async leave operations: apply, review, read, delete."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _build_response(
        leave_req: LeaveRequest,
        employee_name: Optional[str] = None,
    ) -> LeaveRequestOut:
        out = LeaveRequestOut.model_validate(leave_req)
        out.employee_name = employee_name
        return out

    @staticmethod
    async def _get_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> LeaveRequest:
        if for_update:
            leave_req = await get_for_update(db, LeaveRequest, request_id)
        else:
            leave_req = await db.get(LeaveRequest, request_id)
        if leave_req is None:
            raise NotFoundException("LeaveRequest", request_id)
        return leave_req

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        identity_id: uuid.UUID,
        data: LeaveRequestCreate,
    ) -> LeaveRequestOut:
        """File a pending leave request for the caller."""
        profile = await db.get(Profile, identity_id)
        if profile is None:
            raise NotFoundException("Profile", identity_id)

        leave_req = LeaveRequest(
            user_id=identity_id,
            type=data.type,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
            status=LeaveStatus.pending,
        )
        db.add(leave_req)
        await db.flush()

        await log_activity(
            db,
            user_id=identity_id,
            action=ACTIVITY_LEAVE_REQUEST,
            description=(
                f"Leave request submitted for {data.start_date.isoformat()} "
                f"to {data.end_date.isoformat()}"
            ),
        )

        return LeaveService._build_response(leave_req, profile.name)

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leaves(
        db: AsyncSession,
        viewer_id: uuid.UUID,
        *,
        status: Optional[LeaveStatus] = None,
    ) -> list[LeaveRequestOut]:
        """Own requests, or everyone's for admins; newest first."""
        query = (
            select(LeaveRequest, Profile.name)
            .join(Profile, Profile.id == LeaveRequest.user_id)
            .order_by(LeaveRequest.created_at.desc())
        )
        if status is not None:
            query = query.where(LeaveRequest.status == status)
        query = await scope_to_viewer(db, query, LeaveRequest.user_id, viewer_id)

        result = await db.execute(query)
        return [
            LeaveService._build_response(leave_req, name)
            for leave_req, name in result.all()
        ]

    # ─────────────────────────────────────────────────────────────────
    # Review (approve / reject)
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def review_leave(
        db: AsyncSession,
        reviewer_id: uuid.UUID,
        request_id: uuid.UUID,
        data: LeaveReviewRequest,
    ) -> LeaveRequestOut:
        """Move a pending request to a terminal status. Admin only."""
        await require_admin_for_row(db, reviewer_id, "LeaveRequest", request_id)
        # Locked: a concurrent review must see this one's outcome.
        leave_req = await LeaveService._get_request(db, request_id, for_update=True)

        if data.status not in LEAVE_TRANSITIONS[leave_req.status]:
            raise ValidationException(
                {"status": [f"Leave request is already {leave_req.status.value}."]}
            )

        leave_req.status = data.status
        leave_req.reviewed_by = reviewer_id
        leave_req.reviewed_at = datetime.now(timezone.utc)
        leave_req.review_notes = data.review_notes
        await db.flush()

        logger.info(
            "Leave %s %s by %s", leave_req.id, data.status.value, reviewer_id,
        )
        profile = await db.get(Profile, leave_req.user_id)
        return LeaveService._build_response(leave_req, profile.name if profile else None)

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        reviewer_id: uuid.UUID,
        request_id: uuid.UUID,
        *,
        review_notes: Optional[str] = None,
    ) -> LeaveRequestOut:
        return await LeaveService.review_leave(
            db, reviewer_id, request_id,
            LeaveReviewRequest(status=LeaveStatus.approved, review_notes=review_notes),
        )

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        reviewer_id: uuid.UUID,
        request_id: uuid.UUID,
        *,
        review_notes: Optional[str] = None,
    ) -> LeaveRequestOut:
        return await LeaveService.review_leave(
            db, reviewer_id, request_id,
            LeaveReviewRequest(status=LeaveStatus.rejected, review_notes=review_notes),
        )

    # ─────────────────────────────────────────────────────────────────
    # Delete
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def delete_leave(
        db: AsyncSession,
        actor_id: uuid.UUID,
        request_id: uuid.UUID,
    ) -> None:
        await require_admin_for_row(db, actor_id, "LeaveRequest", request_id)
        leave_req = await LeaveService._get_request(db, request_id)
        await db.delete(leave_req)
        await db.flush()
