"""Common module — shared constants, errors and query helpers for HR Desk."""

from hrdesk.common.constants import (
    LEAVE_TRANSITIONS,
    AccessLevel,
    AppRole,
    LeaveStatus,
    LeaveType,
)
from hrdesk.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from hrdesk.common.filters import apply_search, matches_search

__all__ = [
    # Constants / Enums
    "AccessLevel",
    "AppRole",
    "LeaveStatus",
    "LeaveType",
    "LEAVE_TRANSITIONS",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_search",
    "matches_search",
]
