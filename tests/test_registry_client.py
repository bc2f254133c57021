from __future__ import annotations

import json

import httpx
import pytest

from approvalsync.core.errors import RegistryError
from approvalsync.core.registry.client import RegistryClient


def _install(monkeypatch, handler) -> list[httpx.Request]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(recording))
    monkeypatch.setattr("approvalsync.core.http.client.get_http_client", lambda: client)
    return seen


def test_list_approved_sends_credentials_and_normalizes(monkeypatch) -> None:
    seen = _install(
        monkeypatch,
        lambda request: httpx.Response(200, json={"items": [{"id": "f1", "discordId": "u1", "nick": "Ana"}]}),
    )
    registry = RegistryClient(base_url="https://panel.example/api/", api_key="secret")

    records = registry.list_approved()

    assert [(r.id, r.user_id, r.nickname) for r in records] == [("f1", "u1", "Ana")]
    request = seen[0]
    assert request.method == "GET"
    assert str(request.url) == "https://panel.example/api/bot/approved"
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.headers["Content-Type"] == "application/json"


def test_list_approved_without_item_list_is_empty(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(200, json={"items": None}))
    assert RegistryClient("https://panel.example", "k").list_approved() == []


def test_error_message_comes_from_body(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(401, json={"error": "invalid api key"}))

    with pytest.raises(RegistryError) as excinfo:
        RegistryClient("https://panel.example", "k").list_approved()

    assert str(excinfo.value) == "invalid api key"
    assert excinfo.value.status_code == 401


def test_error_message_falls_back_to_status(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(500, text="<html>oops</html>"))

    with pytest.raises(RegistryError, match="HTTP 500"):
        RegistryClient("https://panel.example", "k").list_approved()


def test_malformed_body_is_rejected(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(200, text="not json"))

    with pytest.raises(RegistryError, match="malformed"):
        RegistryClient("https://panel.example", "k").list_approved()


def test_transport_error_becomes_registry_error(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    _install(monkeypatch, handler)

    with pytest.raises(RegistryError):
        RegistryClient("https://panel.example", "k").list_approved()


def test_mark_done_posts_id(monkeypatch) -> None:
    seen = _install(monkeypatch, lambda request: httpx.Response(200, json={"ok": True}))

    RegistryClient("https://panel.example", "k").mark_done("f1")

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://panel.example/bot/mark-done"
    assert json.loads(request.content) == {"id": "f1"}


def test_mark_done_failure_uses_message_field(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(404, json={"message": "form not found"}))

    with pytest.raises(RegistryError, match="form not found"):
        RegistryClient("https://panel.example", "k").mark_done("nope")
