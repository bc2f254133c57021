from __future__ import annotations

from typing import Any, Callable

import pytest

from approvalsync.core.errors import MemberNotFound
from approvalsync.core.membership.base import Member
from approvalsync.core.notifications.schemas import Report
from approvalsync.core.reconcile.reconciler import Reconciler
from approvalsync.core.registry.schemas import normalize_record

REQUIRED_ENV = {
    "BOT_TOKEN": "bot-token-value",
    "GUILD_ID": "guild-1",
    "ROLE_ID": "role-1",
    "LOG_CHANNEL_ID": "chan-1",
    "API_BASE": "https://panel.example/api/",
    "API_KEY": "panel-key",
}


@pytest.fixture(autouse=True)
def no_http_retries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APPROVALSYNC_HTTP_RETRIES", "0")
    monkeypatch.delenv("APPROVALSYNC_CONFIG_FILE", raising=False)


class FakeRegistry:
    def __init__(
        self,
        items: list[dict[str, Any]] | None = None,
        list_error: Exception | None = None,
        mark_done_error: Exception | None = None,
        events: list | None = None,
    ) -> None:
        self.items = items or []
        self.list_error = list_error
        self.mark_done_error = mark_done_error
        self.events = events if events is not None else []
        self.list_calls = 0
        self.marked: list[str] = []

    def list_approved(self):
        self.list_calls += 1
        self.events.append(("list_approved",))
        if self.list_error is not None:
            raise self.list_error
        return [normalize_record(item) for item in self.items]

    def mark_done(self, record_id: str) -> None:
        self.events.append(("mark_done", record_id))
        if self.mark_done_error is not None:
            raise self.mark_done_error
        self.marked.append(record_id)


class FakeGateway:
    def __init__(
        self,
        grant_error: Exception | None = None,
        unknown_users: set[str] | None = None,
        roster_error: Exception | None = None,
        events: list | None = None,
    ) -> None:
        self.grant_error = grant_error
        self.unknown_users = unknown_users or set()
        self.roster_error = roster_error
        self.events = events if events is not None else []
        self.grants: list[tuple[str, str, str]] = []
        self.roster_refreshes = 0

    def refresh_roster(self) -> int:
        self.roster_refreshes += 1
        if self.roster_error is not None:
            raise self.roster_error
        return 0

    def resolve_member(self, user_id: str) -> Member:
        if user_id in self.unknown_users:
            raise MemberNotFound(user_id)
        return Member(user_id=user_id)

    def grant_role(self, user_id: str, role_id: str, reason: str) -> None:
        self.grants.append((user_id, role_id, reason))
        self.events.append(("grant_role", user_id))
        if self.grant_error is not None:
            raise self.grant_error


class RecorderNotifier:
    def __init__(self, events: list | None = None) -> None:
        self.reports: list[Report] = []
        self.events = events if events is not None else []

    def send(self, report: Report) -> None:
        self.reports.append(report)
        self.events.append(("report", report.kind))


@pytest.fixture
def required_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    return dict(REQUIRED_ENV)


@pytest.fixture
def make_reconciler() -> Callable[..., tuple[Reconciler, FakeRegistry, FakeGateway, RecorderNotifier]]:
    def _make(
        items: list[dict[str, Any]] | None = None,
        *,
        list_error: Exception | None = None,
        mark_done_error: Exception | None = None,
        grant_error: Exception | None = None,
        unknown_users: set[str] | None = None,
        roster_error: Exception | None = None,
    ):
        events: list = []
        registry = FakeRegistry(items, list_error=list_error, mark_done_error=mark_done_error, events=events)
        gateway = FakeGateway(
            grant_error=grant_error,
            unknown_users=unknown_users,
            roster_error=roster_error,
            events=events,
        )
        notifier = RecorderNotifier(events=events)
        reconciler = Reconciler(registry=registry, gateway=gateway, notifier=notifier, role_id="role-1")
        return reconciler, registry, gateway, notifier

    return _make
