"""HTTP client for the HR Desk API.

Thin async wrapper over ``httpx.AsyncClient``: one instance per session,
bearer token attached when present, no retries. Every non-2xx response and
every transport failure surfaces as :class:`APIError` so callers have a
single exception to recover from.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Any, Optional

import httpx

from hrdesk.client.config import client_settings

logger = logging.getLogger(__name__)


class APIError(Exception):
    """A failed API call. ``status_code`` is ``None`` for transport errors."""

    def __init__(
        self,
        status_code: Optional[int],
        detail: str,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.errors = errors or {}
        super().__init__(detail)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIError":
        """Build from an RFC 7807 body, falling back to the raw text."""
        try:
            body = response.json()
        except ValueError:
            return cls(response.status_code, response.text or response.reason_phrase)

        if not isinstance(body, dict):
            return cls(response.status_code, str(body))
        detail = body.get("detail") or body.get("title") or response.reason_phrase
        if not isinstance(detail, str):
            detail = str(detail)
        return cls(response.status_code, detail, body.get("errors"))


class HRDeskClient:
    """Async HR Desk API client."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = token
        self._http = httpx.AsyncClient(
            base_url=base_url or client_settings.API_BASE_URL,
            timeout=timeout if timeout is not None else client_settings.CLIENT_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "HRDeskClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    # ── Core request ────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        headers = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._http.request(
                method, path, params=params, json=json, headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise APIError(None, str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            error = APIError.from_response(response)
            logger.info("%s %s → %d %s", method, path, response.status_code, error.detail)
            raise error

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, path)
            raise APIError(response.status_code, "Invalid response body") from exc

    # ── Auth ────────────────────────────────────────────────────────

    async def get_role(self) -> dict[str, Any]:
        return await self._request("GET", "/auth/role")

    async def get_me(self) -> dict[str, Any]:
        return await self._request("GET", "/auth/me")

    # ── Employees / profile ─────────────────────────────────────────

    async def list_employees(self, search: Optional[str] = None) -> list[dict[str, Any]]:
        return await self._request("GET", "/employees", params={"search": search})

    async def delete_employee(self, employee_id: uuid.UUID | str) -> None:
        await self._request("DELETE", f"/employees/{employee_id}")

    async def get_profile(self) -> dict[str, Any]:
        return await self._request("GET", "/profile")

    async def update_profile(self, name: str, department: Optional[str]) -> dict[str, Any]:
        return await self._request(
            "PATCH", "/profile", json={"name": name, "department": department},
        )

    # ── Leave ───────────────────────────────────────────────────────

    async def list_leaves(self, status: Optional[str] = None) -> list[dict[str, Any]]:
        return await self._request("GET", "/leaves", params={"status": status})

    async def create_leave(
        self,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/leaves",
            json={
                "type": leave_type,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "reason": reason,
            },
        )

    async def review_leave(
        self,
        leave_id: uuid.UUID | str,
        status: str,
        review_notes: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/leaves/{leave_id}/review",
            json={"status": status, "review_notes": review_notes},
        )

    # ── Attendance ──────────────────────────────────────────────────

    async def list_attendance(
        self,
        user_id: Optional[uuid.UUID | str] = None,
    ) -> list[dict[str, Any]]:
        params = {"user_id": str(user_id) if user_id else None}
        return await self._request("GET", "/attendance", params=params)

    async def clock_in(
        self,
        user_id: uuid.UUID | str,
        notes: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST", "/attendance/clock-in", json={"user_id": str(user_id), "notes": notes},
        )

    async def clock_out(
        self,
        record_id: uuid.UUID | str,
        at: Optional[datetime] = None,
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/attendance/{record_id}/clock-out",
            json={"clock_out": at.isoformat() if at else None},
        )

    # ── Dashboard ───────────────────────────────────────────────────

    async def get_stats(self) -> dict[str, Any]:
        return await self._request("GET", "/dashboard/stats")

    async def get_activity(self, limit: Optional[int] = None) -> list[dict[str, Any]]:
        return await self._request("GET", "/dashboard/activity", params={"limit": limit})
