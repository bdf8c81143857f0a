"""Employee Pydantic v2 schemas — directory, profile, confidential data.

Naming conventions:
  - *Update / *Upsert  → request bodies (write)
  - *Out / *Item       → response bodies (read)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hrdesk.common.constants import AppRole


def _require_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("must not be blank.")
    return v


# ═════════════════════════════════════════════════════════════════════
# Directory
# ═════════════════════════════════════════════════════════════════════


class EmployeeListItem(BaseModel):
    """Directory row as any authenticated viewer may see it."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    department: Optional[str] = None
    hire_date: Optional[date] = None
    roles: list[AppRole] = Field(default_factory=list)


class AdminEmployeeListItem(EmployeeListItem):
    """Directory row for admins — adds the confidential position."""

    position: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Profile
# ═════════════════════════════════════════════════════════════════════


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    department: Optional[str] = None
    hire_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Self-service edit. Email and hire date are not editable."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., max_length=200)
    department: Optional[str] = Field(None, max_length=200)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("department")
    @classmethod
    def blank_department_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class EmployeeAdminUpdate(BaseModel):
    """Admin edit of another profile. Email and role are not editable here."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, max_length=200)
    department: Optional[str] = Field(None, max_length=200)
    hire_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v)


# ═════════════════════════════════════════════════════════════════════
# Confidential record
# ═════════════════════════════════════════════════════════════════════


class ConfidentialOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    position: Optional[str] = None
    salary: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ConfidentialUpsert(BaseModel):
    model_config = ConfigDict(extra="forbid")

    position: Optional[str] = Field(None, max_length=200)
    salary: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=2000)
