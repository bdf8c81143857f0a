"""Leave module tests — request, review state machine, visibility, API endpoints.

Tests run against SQLite via the shared conftest.py fixtures.
"""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from hrdesk.common.audit import ActivityLog
from hrdesk.common.constants import LeaveStatus, LeaveType
from hrdesk.common.exceptions import NotFoundException, ValidationException
from hrdesk.leave.models import LeaveRequest
from hrdesk.leave.schemas import LeaveRequestCreate, LeaveReviewRequest
from hrdesk.leave.service import LeaveService
from tests.conftest import TestSessionFactory, auth_headers, seed_profile


# ═════════════════════════════════════════════════════════════════════
# Helpers — seed data for leave tests
# ═════════════════════════════════════════════════════════════════════


def _leave_payload(
    *,
    leave_type: LeaveType = LeaveType.vacation,
    start: date = date(2025, 7, 1),
    end: date = date(2025, 7, 4),
    reason: str = "Family trip",
) -> LeaveRequestCreate:
    return LeaveRequestCreate(type=leave_type, start_date=start, end_date=end, reason=reason)


# ═════════════════════════════════════════════════════════════════════
# Validation
# ═════════════════════════════════════════════════════════════════════


class TestLeaveValidation:

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            _leave_payload(start=date(2025, 7, 4), end=date(2025, 7, 1))

    def test_single_day_allowed(self):
        data = _leave_payload(start=date(2025, 7, 1), end=date(2025, 7, 1))
        assert data.start_date == data.end_date

    def test_blank_reason_rejected(self):
        with pytest.raises(ValidationError):
            _leave_payload(reason="   ")

    def test_review_cannot_target_pending(self):
        with pytest.raises(ValidationError):
            LeaveReviewRequest(status=LeaveStatus.pending)


# ═════════════════════════════════════════════════════════════════════
# Apply
# ═════════════════════════════════════════════════════════════════════


class TestApplyLeave:

    async def test_apply_creates_pending_request(self, db, employee):
        out = await LeaveService.apply_leave(db, employee.id, _leave_payload())
        assert out.status == LeaveStatus.pending
        assert out.user_id == employee.id
        assert out.reviewed_by is None
        assert out.employee_name == "Eve Employee"

    async def test_apply_logs_activity(self, db, employee):
        await LeaveService.apply_leave(db, employee.id, _leave_payload())
        entries = (await db.execute(
            select(ActivityLog).where(ActivityLog.user_id == employee.id)
        )).scalars().all()
        assert len(entries) == 1
        assert entries[0].action == "leave_request"
        assert entries[0].description == "Leave request submitted for 2025-07-01 to 2025-07-04"

    async def test_apply_without_profile(self, db):
        with pytest.raises(NotFoundException):
            await LeaveService.apply_leave(db, uuid.uuid4(), _leave_payload())


# ═════════════════════════════════════════════════════════════════════
# Review workflow
# ═════════════════════════════════════════════════════════════════════


class TestReviewWorkflow:

    async def _pending(self, db, employee) -> uuid.UUID:
        out = await LeaveService.apply_leave(db, employee.id, _leave_payload())
        return out.id

    async def test_admin_approves_and_stamps_reviewer(self, db, admin, employee):
        leave_id = await self._pending(db, employee)
        out = await LeaveService.approve_leave(db, admin.id, leave_id, review_notes="Enjoy")
        assert out.status == LeaveStatus.approved
        assert out.reviewed_by == admin.id
        assert out.reviewed_at is not None
        assert out.review_notes == "Enjoy"

    async def test_admin_rejects(self, db, admin, employee):
        leave_id = await self._pending(db, employee)
        out = await LeaveService.reject_leave(db, admin.id, leave_id)
        assert out.status == LeaveStatus.rejected
        assert out.reviewed_by == admin.id

    @pytest.mark.parametrize("first", [LeaveStatus.approved, LeaveStatus.rejected])
    @pytest.mark.parametrize("second", [LeaveStatus.approved, LeaveStatus.rejected])
    async def test_terminal_states_are_final(self, db, admin, employee, first, second):
        leave_id = await self._pending(db, employee)
        await LeaveService.review_leave(
            db, admin.id, leave_id, LeaveReviewRequest(status=first),
        )
        with pytest.raises(ValidationException) as exc_info:
            await LeaveService.review_leave(
                db, admin.id, leave_id, LeaveReviewRequest(status=second),
            )
        assert exc_info.value.errors == {
            "status": [f"Leave request is already {first.value}."]
        }

        leave_req = await db.get(LeaveRequest, leave_id)
        assert leave_req.status == first

    async def test_owner_cannot_approve_own_request(self, db, employee):
        leave_id = await self._pending(db, employee)
        with pytest.raises(NotFoundException):
            await LeaveService.approve_leave(db, employee.id, leave_id)

        leave_req = await db.get(LeaveRequest, leave_id)
        assert leave_req.status == LeaveStatus.pending
        assert leave_req.reviewed_by is None

    async def test_review_rereads_request_decided_elsewhere(self, db, admin, employee):
        leave_id = await self._pending(db, employee)
        await db.commit()

        # A second admin approves while ``db`` still holds the row as pending.
        async with TestSessionFactory() as other:
            await LeaveService.approve_leave(other, admin.id, leave_id)
            await other.commit()

        with pytest.raises(ValidationException) as exc_info:
            await LeaveService.reject_leave(db, admin.id, leave_id)
        assert exc_info.value.errors == {"status": ["Leave request is already approved."]}

        leave_req = await db.get(LeaveRequest, leave_id, populate_existing=True)
        assert leave_req.status == LeaveStatus.approved

    async def test_review_missing_request(self, db, admin):
        with pytest.raises(NotFoundException):
            await LeaveService.approve_leave(db, admin.id, uuid.uuid4())


# ═════════════════════════════════════════════════════════════════════
# Visibility
# ═════════════════════════════════════════════════════════════════════


class TestLeaveVisibility:

    async def test_non_admin_sees_only_own(self, db, admin, employee):
        other = await seed_profile(db, name="Oscar Other")
        await LeaveService.apply_leave(db, employee.id, _leave_payload())
        await LeaveService.apply_leave(db, other.id, _leave_payload(reason="Moving"))

        own = await LeaveService.get_leaves(db, employee.id)
        assert [r.user_id for r in own] == [employee.id]

        everyone = await LeaveService.get_leaves(db, admin.id)
        assert {r.employee_name for r in everyone} == {"Eve Employee", "Oscar Other"}

    async def test_status_filter(self, db, admin, employee):
        first = await LeaveService.apply_leave(db, employee.id, _leave_payload())
        await LeaveService.apply_leave(db, employee.id, _leave_payload(reason="Second"))
        await LeaveService.approve_leave(db, admin.id, first.id)

        pending = await LeaveService.get_leaves(db, admin.id, status=LeaveStatus.pending)
        assert [r.reason for r in pending] == ["Second"]


# ═════════════════════════════════════════════════════════════════════
# API
# ═════════════════════════════════════════════════════════════════════


async def test_api_round_trip(client, admin, employee):
    created = await client.post(
        "/api/v1/leaves",
        json={
            "type": "sick",
            "start_date": "2025-02-03",
            "end_date": "2025-02-04",
            "reason": "Flu",
        },
        headers=auth_headers(employee.id),
    )
    assert created.status_code == 201
    leave_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    reviewed = await client.put(
        f"/api/v1/leaves/{leave_id}/review",
        json={"status": "approved"},
        headers=auth_headers(admin.id),
    )
    assert reviewed.status_code == 200
    assert reviewed.json()["reviewed_by"] == str(admin.id)

    listed = await client.get("/api/v1/leaves", headers=auth_headers(employee.id))
    assert [r["status"] for r in listed.json()] == ["approved"]


async def test_api_user_id_in_body_is_rejected(client, admin, employee):
    resp = await client.post(
        "/api/v1/leaves",
        json={
            "user_id": str(admin.id),
            "type": "sick",
            "start_date": "2025-02-03",
            "end_date": "2025-02-04",
            "reason": "Not mine",
        },
        headers=auth_headers(employee.id),
    )
    assert resp.status_code == 422


async def test_api_end_before_start_is_422(client, employee):
    resp = await client.post(
        "/api/v1/leaves",
        json={
            "type": "vacation",
            "start_date": "2025-02-10",
            "end_date": "2025-02-01",
            "reason": "Backwards",
        },
        headers=auth_headers(employee.id),
    )
    assert resp.status_code == 422


async def test_api_non_admin_review_is_404(client, db, employee):
    out = await LeaveService.apply_leave(db, employee.id, _leave_payload())
    await db.commit()

    resp = await client.put(
        f"/api/v1/leaves/{out.id}/review",
        json={"status": "approved"},
        headers=auth_headers(employee.id),
    )
    assert resp.status_code == 404

    async with TestSessionFactory() as session:
        leave_req = await session.get(LeaveRequest, out.id)
        assert leave_req.status == LeaveStatus.pending


async def test_api_second_review_is_422(client, db, admin, employee):
    out = await LeaveService.apply_leave(db, employee.id, _leave_payload())
    await db.commit()

    headers = auth_headers(admin.id)
    first = await client.put(
        f"/api/v1/leaves/{out.id}/review", json={"status": "rejected"}, headers=headers,
    )
    assert first.status_code == 200
    second = await client.put(
        f"/api/v1/leaves/{out.id}/review", json={"status": "approved"}, headers=headers,
    )
    assert second.status_code == 422
    assert second.json()["errors"]["status"] == ["Leave request is already rejected."]


async def test_api_admin_deletes_leave(client, db, admin, employee):
    out = await LeaveService.apply_leave(db, employee.id, _leave_payload())
    await db.commit()

    denied = await client.delete(f"/api/v1/leaves/{out.id}", headers=auth_headers(employee.id))
    assert denied.status_code == 404

    resp = await client.delete(f"/api/v1/leaves/{out.id}", headers=auth_headers(admin.id))
    assert resp.status_code == 204
