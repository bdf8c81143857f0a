"""View models behind the HR Desk screens.

Each view loads its data through the session's API client, exposes the
columns and actions the current role may see, validates form input before
sending it, and re-fetches after every confirmed write. Failures never
escape a view: they are recorded as :class:`Notice` entries for the UI.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Literal, Optional

from pydantic import BaseModel

from hrdesk.client.api import APIError
from hrdesk.client.session import SessionContext
from hrdesk.common.constants import LeaveStatus, LeaveType
from hrdesk.common.filters import matches_search

logger = logging.getLogger(__name__)


class Notice(BaseModel):
    """A user-visible message (toast)."""

    level: Literal["success", "error"]
    title: str
    message: str


class _View:
    def __init__(self, session: SessionContext) -> None:
        self.session = session
        self.notices: list[Notice] = []
        self.is_admin = False
        self.loading = True

    def _success(self, message: str) -> None:
        self.notices.append(Notice(level="success", title="Success", message=message))

    def _error(self, message: str, exc: Optional[APIError] = None, *, title: str = "Error") -> None:
        if exc is not None:
            logger.warning("%s: %s", message, exc.detail)
        self.notices.append(Notice(level="error", title=title, message=message))

    async def _resolve_role(self) -> None:
        self.is_admin = await self.session.is_admin()


# ═══════════════════════════════════════════════════════════════════
# Dashboard
# ═══════════════════════════════════════════════════════════════════

class DashboardView(_View):
    def __init__(self, session: SessionContext) -> None:
        super().__init__(session)
        self.stats: dict[str, int] = {}

    @property
    def cards(self) -> list[tuple[str, int]]:
        return [
            ("Total Employees", self.stats.get("total_employees", 0)),
            ("Pending Leaves", self.stats.get("pending_leaves", 0)),
            ("Active Employees", self.stats.get("active_employees", 0)),
        ]

    async def load(self) -> None:
        try:
            self.stats = await self.session.client.get_stats()
        except APIError as exc:
            self._error("Failed to load dashboard statistics", exc)
        finally:
            self.loading = False


# ═══════════════════════════════════════════════════════════════════
# Employees
# ═══════════════════════════════════════════════════════════════════

class EmployeesView(_View):
    def __init__(self, session: SessionContext) -> None:
        super().__init__(session)
        self.rows: list[dict[str, Any]] = []

    @property
    def columns(self) -> list[str]:
        cols = ["Name", "Email"]
        if self.is_admin:
            cols.append("Position")
        cols += ["Department", "Hire Date", "Role"]
        if self.is_admin:
            cols.append("Actions")
        return cols

    async def load(self) -> None:
        await self._resolve_role()
        try:
            self.rows = await self.session.client.list_employees()
        except APIError as exc:
            self._error("Failed to load employees", exc)
        finally:
            self.loading = False

    def filter(self, term: Optional[str]) -> list[dict[str, Any]]:
        """Rows whose name, email or department contains *term*."""
        return [
            row for row in self.rows
            if matches_search(term, row.get("name"), row.get("email"), row.get("department"))
        ]

    async def delete(self, employee_id: uuid.UUID | str) -> bool:
        if not self.is_admin:
            self._error("Only admins can delete employees", title="Unauthorized")
            return False
        try:
            await self.session.client.delete_employee(employee_id)
        except APIError as exc:
            self._error("Failed to delete employee", exc)
            return False
        self._success("Employee deleted successfully")
        await self.load()
        return True


# ═══════════════════════════════════════════════════════════════════
# Leaves
# ═══════════════════════════════════════════════════════════════════

class LeavesView(_View):
    def __init__(self, session: SessionContext) -> None:
        super().__init__(session)
        self.rows: list[dict[str, Any]] = []

    @property
    def columns(self) -> list[str]:
        cols = ["Employee"] if self.is_admin else []
        cols += ["Type", "Start Date", "End Date", "Reason", "Status"]
        if self.is_admin:
            cols.append("Actions")
        return cols

    def can_review(self, leave: dict[str, Any]) -> bool:
        return self.is_admin and leave.get("status") == LeaveStatus.pending.value

    async def load(self) -> None:
        await self._resolve_role()
        try:
            self.rows = await self.session.client.list_leaves()
        except APIError as exc:
            self._error("Failed to load leaves", exc)
        finally:
            self.loading = False

    @staticmethod
    def validate(
        leave_type: Optional[str],
        start: Optional[str],
        end: Optional[str],
        reason: Optional[str],
    ) -> tuple[Optional[tuple[LeaveType, date, date, str]], Optional[str]]:
        """Return ``(values, None)`` or ``(None, message)``."""
        if not leave_type or not start or not end or not reason or not reason.strip():
            return None, "Please fill in all required fields"
        try:
            parsed_type = LeaveType(leave_type)
        except ValueError:
            return None, f"Unknown leave type: {leave_type}"
        try:
            start_date = date.fromisoformat(start)
            end_date = date.fromisoformat(end)
        except ValueError:
            return None, "Dates must be in YYYY-MM-DD format"
        if end_date < start_date:
            return None, "End date cannot be before start date"
        return (parsed_type, start_date, end_date, reason.strip()), None

    async def submit(
        self,
        leave_type: Optional[str],
        start: Optional[str],
        end: Optional[str],
        reason: Optional[str],
    ) -> bool:
        values, problem = self.validate(leave_type, start, end, reason)
        if values is None:
            self._error(problem)
            return False

        parsed_type, start_date, end_date, text = values
        try:
            await self.session.client.create_leave(parsed_type.value, start_date, end_date, text)
        except APIError as exc:
            self._error("Failed to submit leave request", exc)
            return False
        self._success("Leave request submitted successfully")
        await self.load()
        return True

    async def _review(self, leave_id: uuid.UUID | str, status: LeaveStatus, notes: Optional[str]) -> bool:
        verb = "approve" if status == LeaveStatus.approved else "reject"
        try:
            await self.session.client.review_leave(leave_id, status.value, notes)
        except APIError as exc:
            self._error(f"Failed to {verb} leave", exc)
            return False
        self._success(f"Leave {status.value}")
        await self.load()
        return True

    async def approve(self, leave_id: uuid.UUID | str, notes: Optional[str] = None) -> bool:
        return await self._review(leave_id, LeaveStatus.approved, notes)

    async def reject(self, leave_id: uuid.UUID | str, notes: Optional[str] = None) -> bool:
        return await self._review(leave_id, LeaveStatus.rejected, notes)


# ═══════════════════════════════════════════════════════════════════
# Attendance
# ═══════════════════════════════════════════════════════════════════

class AttendanceView(_View):
    def __init__(self, session: SessionContext) -> None:
        super().__init__(session)
        self.rows: list[dict[str, Any]] = []
        self.employees: list[dict[str, Any]] = []

    @property
    def columns(self) -> list[str]:
        cols = ["Employee", "Clock In", "Clock Out", "Duration", "Notes"]
        if self.is_admin:
            cols.append("Actions")
        return cols

    @staticmethod
    def duration_label(row: dict[str, Any]) -> str:
        hours = row.get("duration_hours")
        if hours is None:
            return "-"
        return f"{hours} hours"

    def can_clock_out(self, row: dict[str, Any]) -> bool:
        return self.is_admin and row.get("clock_out") is None

    async def load(self) -> None:
        await self._resolve_role()
        try:
            self.rows = await self.session.client.list_attendance()
            if self.is_admin:
                self.employees = await self.session.client.list_employees()
        except APIError as exc:
            self._error("Failed to load attendance records", exc)
        finally:
            self.loading = False

    async def clock_in(self, employee_id: Optional[uuid.UUID | str], notes: Optional[str] = None) -> bool:
        if not self.is_admin:
            self._error("Only admins can mark attendance", title="Unauthorized")
            return False
        if not employee_id:
            self._error("Please select an employee")
            return False
        try:
            await self.session.client.clock_in(employee_id, notes or None)
        except APIError as exc:
            self._error("Failed to record clock in", exc)
            return False
        self._success("Clock in recorded successfully")
        await self.load()
        return True

    async def clock_out(self, record_id: uuid.UUID | str) -> bool:
        if not self.is_admin:
            self._error("Only admins can mark attendance", title="Unauthorized")
            return False
        try:
            await self.session.client.clock_out(record_id)
        except APIError as exc:
            self._error("Failed to record clock out", exc)
            return False
        self._success("Clock out recorded successfully")
        await self.load()
        return True


# ═══════════════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════════════

class ProfileView(_View):
    def __init__(self, session: SessionContext) -> None:
        super().__init__(session)
        self.profile: Optional[dict[str, Any]] = None

    async def load(self) -> None:
        try:
            self.profile = await self.session.client.get_profile()
        except APIError as exc:
            self._error("Failed to load profile", exc)
        finally:
            self.loading = False

    async def save(self, name: Optional[str], department: Optional[str]) -> bool:
        if not name or not name.strip():
            self._error("Name is required")
            return False
        try:
            await self.session.client.update_profile(name.strip(), (department or "").strip() or None)
        except APIError as exc:
            self._error("Failed to update profile", exc)
            return False
        self._success("Profile updated successfully")
        await self.load()
        return True
