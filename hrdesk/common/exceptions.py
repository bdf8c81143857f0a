"""Application errors and their RFC 7807 rendering.

Every error leaving the API is ``application/problem+json``: domain errors
(:class:`AppException`), request-body validation, framework HTTP errors and
database integrity violations. Clients read ``detail`` and, for 409/422,
the per-field ``errors`` map.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

BASE_ERROR_URI = "https://hrdesk.local/errors"
PROBLEM_JSON = "application/problem+json"

logger = logging.getLogger(__name__)


class AppException(Exception):
    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class UnauthorizedException(AppException):
    """401 — missing, expired or unverifiable credentials."""

    def __init__(self, detail: str = "Authentication required.") -> None:
        super().__init__(401, "unauthorized", "Unauthorized", detail)


class ForbiddenException(AppException):
    """403 — admin-only action on a collection (clock-in, role assignment...)."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(403, "forbidden", "Forbidden", detail)


class NotFoundException(AppException):
    """404 — row missing, or hidden from the caller by the row policies.

    Both cases share one body so a caller cannot probe for hidden rows.
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            404,
            "not-found",
            f"{entity_type} Not Found",
            f"{entity_type} with id '{entity_id}' does not exist.",
        )


class ConflictError(AppException):
    """409 — the value is already taken (profile id, email)."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            409,
            "conflict",
            "Conflict",
            f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ValidationException(AppException):
    """422 — a state or ordering rule failed (terminal leave, double clock-out)."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            422,
            "validation-error",
            "Validation Error",
            "One or more fields failed validation.",
            errors=errors,
        )


# ── Rendering ───────────────────────────────────────────────────────

def _problem_response(
    request: Request,
    status_code: int,
    error_type: str,
    title: str,
    detail: str,
    errors: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{error_type}",
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": str(request.url.path),
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body, media_type=PROBLEM_JSON)


def _field_name(loc: tuple) -> str:
    # ("body", "start_date") -> "start_date"; ("query", "status") -> "status"
    if len(loc) > 1:
        return ".".join(str(p) for p in loc[1:])
    return str(loc[0]) if loc else "unknown"


# ── Handlers ────────────────────────────────────────────────────────

async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    logger.info(
        "%s %s → %d %s", request.method, request.url.path, exc.status_code, exc.error_type,
    )
    return _problem_response(
        request, exc.status_code, exc.error_type, exc.title, exc.detail, exc.errors,
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field_errors.setdefault(_field_name(err.get("loc", ())), []).append(
            err.get("msg", "Invalid value")
        )
    return _problem_response(
        request, 422, "validation-error", "Validation Error",
        "Request validation failed.", field_errors,
    )


async def _handle_http_exception(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    response = _problem_response(
        request,
        exc.status_code,
        "http-error",
        HTTPStatus(exc.status_code).phrase,
        str(exc.detail),
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    # Unique / foreign-key races that slipped past the service-level checks.
    logger.warning("%s %s integrity error: %s", request.method, request.url.path, exc.orig)
    return _problem_response(
        request, 409, "conflict", "Conflict",
        "The change conflicts with the current state of the data.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, _handle_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _handle_integrity_error)  # type: ignore[arg-type]
