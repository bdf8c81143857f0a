"""Auth Pydantic schemas for request / response validation."""


import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrdesk.common.constants import AccessLevel, AppRole


# ── Identity (from the auth provider's token) ──────────────────────

class Identity(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None


# ── Signup hook ─────────────────────────────────────────────────────

class SignupMetadata(BaseModel):
    name: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None
    position: Optional[str] = None


class SignupHookRequest(BaseModel):
    """Payload the auth provider posts after creating an identity."""

    id: uuid.UUID
    email: str = Field(..., min_length=3, max_length=255)
    user_metadata: SignupMetadata = Field(default_factory=SignupMetadata)


class SignupHookResponse(BaseModel):
    id: uuid.UUID
    role: AppRole
    confidential_record_created: bool


# ── Roles ───────────────────────────────────────────────────────────

class ResolvedRole(BaseModel):
    """Role used for UI affordances. Never an authorization decision."""

    role: Optional[AppRole] = None
    access_level: AccessLevel
    is_admin: bool = False


class RoleAssignmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    role: AppRole
    created_at: datetime


class RoleUpdate(BaseModel):
    role: AppRole


# ── Responses ───────────────────────────────────────────────────────

class MeResponse(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[AppRole] = None
    is_admin: bool = False
