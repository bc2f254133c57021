from __future__ import annotations

import os
import random
import threading
import time

import httpx

from .errors import SyncHTTPNetworkError, SyncHTTPStatusError

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_RETRYABLE_EXCEPTIONS = (httpx.ConnectError, httpx.ReadTimeout, httpx.RemoteProtocolError)
_DEFAULT_TIMEOUT_S = 15.0
_DEFAULT_CONNECT_TIMEOUT_S = 5.0
_DEFAULT_RETRIES = 2
_DEFAULT_BACKOFF_BASE_S = 0.25
_DEFAULT_BACKOFF_MAX_S = 2.0
_MAX_RETRY_AFTER_S = 10.0
_DEFAULT_USER_AGENT = "approvalsync/0.1"

_client: httpx.Client | None = None
_client_lock = threading.Lock()


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _build_timeout(total_s: float | None = None) -> httpx.Timeout:
    connect_s = max(0.1, _get_float_env("APPROVALSYNC_HTTP_CONNECT_TIMEOUT_S", _DEFAULT_CONNECT_TIMEOUT_S))
    read_total = max(0.1, total_s if total_s is not None else _get_float_env("APPROVALSYNC_HTTP_TIMEOUT_S", _DEFAULT_TIMEOUT_S))
    return httpx.Timeout(read_total, connect=min(connect_s, read_total))


def get_http_client() -> httpx.Client:
    global _client
    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            user_agent = os.getenv("APPROVALSYNC_HTTP_USER_AGENT", _DEFAULT_USER_AGENT)
            _client = httpx.Client(timeout=_build_timeout(), headers={"User-Agent": user_agent})
    return _client


def close_http_client() -> None:
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None


def response_error_message(response: httpx.Response) -> str:
    """Pull a human readable error out of a JSON body, falling back to the status code."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("error", "message"):
            value = payload.get(key)
            if value:
                return str(value)
    return f"HTTP {response.status_code}"


def request_with_retry(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json: object | None = None,
    params: dict[str, object] | None = None,
    timeout_override: float | None = None,
    retries: int | None = None,
    allowed_statuses: set[int] | None = None,
) -> httpx.Response:
    max_retries = _get_int_env("APPROVALSYNC_HTTP_RETRIES", _DEFAULT_RETRIES) if retries is None else max(0, retries)
    backoff_base = max(0.01, _get_float_env("APPROVALSYNC_HTTP_BACKOFF_BASE_S", _DEFAULT_BACKOFF_BASE_S))
    backoff_max = max(0.01, _get_float_env("APPROVALSYNC_HTTP_BACKOFF_MAX_S", _DEFAULT_BACKOFF_MAX_S))

    client = get_http_client()
    attempts = max_retries + 1

    last_exc: Exception | None = None
    for attempt in range(attempts):
        try:
            response = client.request(
                method,
                url,
                headers=headers or None,
                json=json,
                params=params,
                timeout=_build_timeout(timeout_override) if timeout_override is not None else None,
            )
        except _RETRYABLE_EXCEPTIONS as exc:
            last_exc = exc
            if attempt >= max_retries:
                raise SyncHTTPNetworkError(f"HTTP request failed after retries for {url}: {exc.__class__.__name__}") from exc
            _sleep_for_retry(attempt, backoff_base, backoff_max)
            continue
        except httpx.HTTPError as exc:
            raise SyncHTTPNetworkError(f"HTTP request error for {url}: {exc.__class__.__name__}") from exc

        status = response.status_code
        if allowed_statuses is not None and status in allowed_statuses:
            return response
        if 200 <= status < 300:
            return response
        if status in _RETRYABLE_STATUS_CODES and attempt < max_retries:
            retry_after = _retry_after_s(response) if status == 429 else None
            if retry_after is not None:
                time.sleep(retry_after)
            else:
                _sleep_for_retry(attempt, backoff_base, backoff_max)
            continue
        raise SyncHTTPStatusError(f"HTTP status {status} for {url}", status_code=status, response=response)

    raise SyncHTTPNetworkError(f"HTTP request failed for {url}: {last_exc}")


def _retry_after_s(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return min(_MAX_RETRY_AFTER_S, max(0.0, float(raw)))
    except ValueError:
        return None


def _sleep_for_retry(attempt: int, backoff_base: float, backoff_max: float) -> None:
    sleep_s = min(backoff_max, backoff_base * (2**attempt)) * (0.5 + random.random())
    time.sleep(sleep_s)
