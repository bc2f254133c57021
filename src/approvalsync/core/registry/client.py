from __future__ import annotations

import logging
from typing import Any, Protocol

from approvalsync.core.errors import RegistryError
from approvalsync.core.http.client import request_with_retry, response_error_message
from approvalsync.core.http.errors import SyncHTTPError, SyncHTTPStatusError

from .schemas import ApprovalRecord, normalize_record

logger = logging.getLogger(__name__)


class ApprovalRegistry(Protocol):
    def list_approved(self) -> list[ApprovalRecord]: ...

    def mark_done(self, record_id: str) -> None: ...


class RegistryClient:
    """Client for the approval panel's bot endpoints."""

    def __init__(self, base_url: str, api_key: str, timeout_s: float | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_s = timeout_s

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(self, method: str, path: str, json: object | None = None) -> dict[str, Any]:
        try:
            response = request_with_retry(
                method,
                self.base_url + path,
                headers=self._headers(),
                json=json,
                timeout_override=self.timeout_s,
            )
        except SyncHTTPStatusError as exc:
            if exc.response is not None:
                raise RegistryError(response_error_message(exc.response), status_code=exc.status_code) from exc
            raise RegistryError(f"HTTP {exc.status_code}", status_code=exc.status_code) from exc
        except SyncHTTPError as exc:
            raise RegistryError(str(exc)) from exc

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise RegistryError(f"malformed response body from {path}", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise RegistryError(f"unexpected response body from {path}", status_code=response.status_code)
        return payload

    def list_approved(self) -> list[ApprovalRecord]:
        payload = self._request("GET", "/bot/approved")
        items = payload.get("items")
        if not isinstance(items, list):
            logger.warning("approved feed returned no item list")
            return []
        return [normalize_record(item) for item in items if isinstance(item, dict)]

    def mark_done(self, record_id: str) -> None:
        self._request("POST", "/bot/mark-done", json={"id": record_id})
