"""Client module — API client, session context and view models for HR Desk UIs."""

from hrdesk.client.api import APIError, HRDeskClient
from hrdesk.client.session import RoleResolver, SessionContext
from hrdesk.client.views import (
    AttendanceView,
    DashboardView,
    EmployeesView,
    LeavesView,
    Notice,
    ProfileView,
)

__all__ = [
    "APIError",
    "HRDeskClient",
    "RoleResolver",
    "SessionContext",
    "Notice",
    "DashboardView",
    "EmployeesView",
    "LeavesView",
    "AttendanceView",
    "ProfileView",
]
