from __future__ import annotations

import httpx


class SyncHTTPError(RuntimeError):
    """Base error for shared HTTP client operations."""


class SyncHTTPStatusError(SyncHTTPError):
    def __init__(self, message: str, status_code: int | None = None, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class SyncHTTPNetworkError(SyncHTTPError):
    """Raised when request retries are exhausted for transport errors."""
