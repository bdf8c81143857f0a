"""Leave Pydantic v2 schemas — request / response validation."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hrdesk.common.constants import LeaveStatus, LeaveType


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for requesting leave. The requester is always the caller."""

    model_config = ConfigDict(extra="forbid")

    type: LeaveType
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    reason: str = Field(..., max_length=1000, description="Reason for leave")

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reason is required.")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date.")
        return self


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Review
# ═════════════════════════════════════════════════════════════════════


class LeaveReviewRequest(BaseModel):
    """Approve or reject a pending request."""

    status: LeaveStatus
    review_notes: Optional[str] = Field(None, max_length=500)

    @field_validator("status")
    @classmethod
    def terminal_status_only(cls, v: LeaveStatus) -> LeaveStatus:
        if v == LeaveStatus.pending:
            raise ValueError("status must be 'approved' or 'rejected'.")
        return v


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    review_notes: Optional[str] = None
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    # Enriched by service
    employee_name: Optional[str] = None
