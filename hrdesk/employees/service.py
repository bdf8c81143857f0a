"""Employee service layer — directory, profile edits, confidential records.

Business logic:
  - Directory reads scoped by the ``self | admin`` policy
  - Position (confidential) merged into directory rows for admins only
  - Self edits limited to name/department; admin edits add hire_date
  - Deleting an employee removes everything they own
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.attendance.models import AttendanceRecord
from hrdesk.auth.models import RoleAssignment
from hrdesk.auth.policies import (
    is_admin,
    owned_or_all,
    require_admin,
    require_admin_for_row,
)
from hrdesk.common.audit import ActivityLog
from hrdesk.common.exceptions import NotFoundException
from hrdesk.common.filters import apply_search
from hrdesk.employees.models import ConfidentialRecord, Profile
from hrdesk.employees.schemas import (
    AdminEmployeeListItem,
    ConfidentialUpsert,
    EmployeeAdminUpdate,
    EmployeeListItem,
    ProfileUpdate,
)
from hrdesk.leave.models import LeaveRequest

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("name", "email", "department")


class EmployeeService:
    """Async employee directory and profile operations."""

    # ── Directory ───────────────────────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        viewer_id: uuid.UUID,
        *,
        search: Optional[str] = None,
    ) -> list[EmployeeListItem]:
        """Visible profiles ordered by name, with roles (and positions for admins)."""
        admin = await is_admin(db, viewer_id)

        query = owned_or_all(select(Profile), Profile.id, viewer_id, admin=admin)
        query = apply_search(query, Profile, search, SEARCH_COLUMNS)
        result = await db.execute(query.order_by(Profile.name))
        profiles = result.scalars().all()
        if not profiles:
            return []

        ids = [p.id for p in profiles]
        role_rows = await db.execute(
            select(RoleAssignment.user_id, RoleAssignment.role).where(
                RoleAssignment.user_id.in_(ids)
            )
        )
        roles: dict[uuid.UUID, list] = {}
        for user_id, role in role_rows.all():
            roles.setdefault(user_id, []).append(role)

        if not admin:
            return [
                EmployeeListItem(
                    id=p.id,
                    name=p.name,
                    email=p.email,
                    department=p.department,
                    hire_date=p.hire_date,
                    roles=roles.get(p.id, []),
                )
                for p in profiles
            ]

        pos_rows = await db.execute(
            select(ConfidentialRecord.user_id, ConfidentialRecord.position).where(
                ConfidentialRecord.user_id.in_(ids)
            )
        )
        positions = dict(pos_rows.all())
        return [
            AdminEmployeeListItem(
                id=p.id,
                name=p.name,
                email=p.email,
                department=p.department,
                hire_date=p.hire_date,
                roles=roles.get(p.id, []),
                position=positions.get(p.id),
            )
            for p in profiles
        ]

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        viewer_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> Profile:
        admin = await is_admin(db, viewer_id)
        query = owned_or_all(
            select(Profile).where(Profile.id == employee_id),
            Profile.id,
            viewer_id,
            admin=admin,
        )
        result = await db.execute(query)
        profile = result.scalars().first()
        if profile is None:
            raise NotFoundException("Employee", employee_id)
        return profile

    # ── Profile edits ───────────────────────────────────────────────

    @staticmethod
    async def get_own_profile(db: AsyncSession, identity_id: uuid.UUID) -> Profile:
        profile = await db.get(Profile, identity_id)
        if profile is None:
            raise NotFoundException("Profile", identity_id)
        return profile

    @staticmethod
    async def update_own_profile(
        db: AsyncSession,
        identity_id: uuid.UUID,
        data: ProfileUpdate,
    ) -> Profile:
        profile = await EmployeeService.get_own_profile(db, identity_id)
        profile.name = data.name
        profile.department = data.department
        await db.flush()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        actor_id: uuid.UUID,
        employee_id: uuid.UUID,
        data: EmployeeAdminUpdate,
    ) -> Profile:
        await require_admin_for_row(db, actor_id, "Employee", employee_id)
        profile = await db.get(Profile, employee_id)
        if profile is None:
            raise NotFoundException("Employee", employee_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            setattr(profile, field, value)
        await db.flush()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def delete_employee(
        db: AsyncSession,
        actor_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> None:
        """Remove a profile with everything it owns. Admin only."""
        await require_admin_for_row(db, actor_id, "Employee", employee_id)
        profile = await db.get(Profile, employee_id)
        if profile is None:
            raise NotFoundException("Employee", employee_id)

        # Detach references held on other people's rows
        await db.execute(
            update(LeaveRequest)
            .where(LeaveRequest.reviewed_by == employee_id)
            .values(reviewed_by=None)
        )
        await db.execute(
            update(AttendanceRecord)
            .where(AttendanceRecord.marked_by == employee_id)
            .values(marked_by=None)
        )

        for model in (LeaveRequest, AttendanceRecord, ActivityLog,
                      ConfidentialRecord, RoleAssignment):
            await db.execute(delete(model).where(model.user_id == employee_id))

        await db.delete(profile)
        await db.flush()
        logger.info("Employee %s deleted by %s", employee_id, actor_id)

    # ── Confidential records ────────────────────────────────────────

    @staticmethod
    async def get_confidential(
        db: AsyncSession,
        actor_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> ConfidentialRecord:
        await require_admin_for_row(db, actor_id, "ConfidentialRecord", employee_id)
        result = await db.execute(
            select(ConfidentialRecord).where(ConfidentialRecord.user_id == employee_id)
        )
        record = result.scalars().first()
        if record is None:
            raise NotFoundException("ConfidentialRecord", employee_id)
        return record

    @staticmethod
    async def upsert_confidential(
        db: AsyncSession,
        actor_id: uuid.UUID,
        employee_id: uuid.UUID,
        data: ConfidentialUpsert,
    ) -> ConfidentialRecord:
        await require_admin(db, actor_id, "manage confidential records")
        if await db.get(Profile, employee_id) is None:
            raise NotFoundException("Employee", employee_id)

        result = await db.execute(
            select(ConfidentialRecord).where(ConfidentialRecord.user_id == employee_id)
        )
        record = result.scalars().first()
        if record is None:
            record = ConfidentialRecord(user_id=employee_id)
            db.add(record)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(record, field, value)
        await db.flush()
        await db.refresh(record)
        return record

    @staticmethod
    async def delete_confidential(
        db: AsyncSession,
        actor_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> None:
        record = await EmployeeService.get_confidential(db, actor_id, employee_id)
        await db.delete(record)
        await db.flush()
