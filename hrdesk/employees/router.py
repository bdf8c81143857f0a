"""Employee router — directory, own profile, roles, confidential records.

Routes:
    /employees                      — Directory (search by name/email/department)
    /employees/{id}                 — Get, update (admin), delete (admin)
    /employees/{id}/role            — Set role (admin)
    /employees/{id}/confidential    — Get, upsert, delete (admin)
    /profile                        — Own profile: get, update
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.auth.dependencies import get_current_identity
from hrdesk.auth.schemas import Identity, RoleAssignmentOut, RoleUpdate
from hrdesk.auth.service import set_role
from hrdesk.database import get_db
from hrdesk.employees.schemas import (
    ConfidentialOut,
    ConfidentialUpsert,
    EmployeeAdminUpdate,
    ProfileOut,
    ProfileUpdate,
)
from hrdesk.employees.service import EmployeeService


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

employees_router = APIRouter(prefix="", tags=["employees"])
profile_router = APIRouter(prefix="", tags=["profile"])


# ── GET /employees ──────────────────────────────────────────────────

@employees_router.get("")
async def list_employees(
    search: Optional[str] = Query(None, max_length=200),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Directory. Admins see everyone plus positions; others see themselves."""
    return await EmployeeService.list_employees(db, identity.id, search=search)


# ── GET /employees/{id} ─────────────────────────────────────────────

@employees_router.get("/{employee_id}", response_model=ProfileOut)
async def get_employee(
    employee_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_employee(db, identity.id, employee_id)


# ── PATCH /employees/{id} ───────────────────────────────────────────

@employees_router.patch("/{employee_id}", response_model=ProfileOut)
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeAdminUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.update_employee(db, identity.id, employee_id, body)


# ── DELETE /employees/{id} ──────────────────────────────────────────

@employees_router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await EmployeeService.delete_employee(db, identity.id, employee_id)


# ── PUT /employees/{id}/role ────────────────────────────────────────

@employees_router.put("/{employee_id}/role", response_model=RoleAssignmentOut)
async def update_role(
    employee_id: uuid.UUID,
    body: RoleUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await set_role(db, identity.id, employee_id, body.role)


# ── /employees/{id}/confidential ────────────────────────────────────

@employees_router.get("/{employee_id}/confidential", response_model=ConfidentialOut)
async def get_confidential(
    employee_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Admin only. Anyone else gets the same 404 as a missing record."""
    return await EmployeeService.get_confidential(db, identity.id, employee_id)


@employees_router.put("/{employee_id}/confidential", response_model=ConfidentialOut)
async def upsert_confidential(
    employee_id: uuid.UUID,
    body: ConfidentialUpsert,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.upsert_confidential(db, identity.id, employee_id, body)


@employees_router.delete("/{employee_id}/confidential", status_code=204)
async def delete_confidential(
    employee_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await EmployeeService.delete_confidential(db, identity.id, employee_id)


# ── /profile ────────────────────────────────────────────────────────

@profile_router.get("", response_model=ProfileOut)
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_own_profile(db, identity.id)


@profile_router.patch("", response_model=ProfileOut)
async def update_profile(
    body: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Edit own name and department."""
    return await EmployeeService.update_own_profile(db, identity.id, body)
