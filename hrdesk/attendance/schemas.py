"""Attendance Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClockInRequest(BaseModel):
    """Admin marks an employee as clocked in now."""

    user_id: uuid.UUID
    notes: Optional[str] = Field(None, max_length=1000)


class ClockOutRequest(BaseModel):
    """Close an open record. ``clock_out`` defaults to now."""

    clock_out: Optional[datetime] = None


class AttendanceRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    clock_in: datetime
    clock_out: Optional[datetime] = None
    notes: Optional[str] = None
    marked_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    # Computed / enriched by service
    duration_hours: Optional[float] = None
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None
