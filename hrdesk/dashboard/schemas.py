"""Dashboard Pydantic v2 schemas — stat cards and activity feed."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DashboardStatsResponse(BaseModel):
    """Stat cards, each counted over rows visible to the caller."""

    total_employees: int = Field(..., description="Visible profiles")
    pending_leaves: int = Field(..., description="Visible leave requests with status=pending")
    active_employees: int = Field(..., description="Visible profiles")


class ActivityLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    action: str
    description: Optional[str] = None
    created_at: datetime
