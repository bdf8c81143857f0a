"""Enums and constants for HR Desk — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class AppRole(str, enum.Enum):
    admin = "admin"
    user = "user"


class AccessLevel(str, enum.Enum):
    unauthenticated = "unauthenticated"
    authenticated = "authenticated"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    sick = "sick"
    vacation = "vacation"
    personal = "personal"
    other = "other"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# pending is the only non-terminal state
LEAVE_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.pending: frozenset({LeaveStatus.approved, LeaveStatus.rejected}),
    LeaveStatus.approved: frozenset(),
    LeaveStatus.rejected: frozenset(),
}


# ── Activity log actions ────────────────────────────────────────────

ACTIVITY_LEAVE_REQUEST = "leave_request"


# ── Row-policy settings (PostgreSQL, transaction-local) ─────────────

CURRENT_USER_SETTING = "app.current_user_id"
PROVISIONING_SETTING = "app.provisioning"


# ── Misc constants ──────────────────────────────────────────────────

DEFAULT_PROFILE_NAME = "New User"
SECONDS_PER_HOUR = 3600
