from __future__ import annotations

import logging
import threading
from typing import Any
from urllib.parse import quote

from approvalsync.core.errors import MemberNotFound, MembershipError, RoleGrantError
from approvalsync.core.http.client import request_with_retry, response_error_message
from approvalsync.core.http.errors import SyncHTTPError, SyncHTTPStatusError

from .base import Member

logger = logging.getLogger(__name__)

_ROSTER_PAGE_LIMIT = 1000


def _member_from_payload(payload: dict[str, Any]) -> Member:
    user = payload.get("user") or {}
    return Member(
        user_id=str(user.get("id", "")),
        username=user.get("username"),
        nick=payload.get("nick"),
        roles=[str(role) for role in payload.get("roles", [])],
    )


def _error_message(exc: SyncHTTPError) -> str:
    if isinstance(exc, SyncHTTPStatusError) and exc.response is not None:
        return response_error_message(exc.response)
    return str(exc)


class DiscordGuildGateway:
    """Guild membership and role mutations over the Discord REST API."""

    def __init__(self, bot_token: str, guild_id: str, api_base: str = "https://discord.com/api/v10") -> None:
        self.bot_token = bot_token
        self.guild_id = guild_id
        self.api_base = api_base.rstrip("/")
        self._roster: dict[str, Member] = {}
        self._roster_lock = threading.Lock()

    def _headers(self, reason: str | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bot {self.bot_token}", "Content-Type": "application/json"}
        if reason:
            headers["X-Audit-Log-Reason"] = quote(reason, safe=" ")
        return headers

    def _guild_url(self, path: str = "") -> str:
        return f"{self.api_base}/guilds/{self.guild_id}{path}"

    def refresh_roster(self) -> int:
        roster: dict[str, Member] = {}
        after = "0"
        while True:
            try:
                response = request_with_retry(
                    "GET",
                    self._guild_url("/members"),
                    headers=self._headers(),
                    params={"limit": _ROSTER_PAGE_LIMIT, "after": after},
                )
            except SyncHTTPError as exc:
                raise MembershipError(f"roster refresh failed: {_error_message(exc)}") from exc
            page = response.json()
            if not isinstance(page, list) or not page:
                break
            for payload in page:
                member = _member_from_payload(payload)
                if member.user_id:
                    roster[member.user_id] = member
            if len(page) < _ROSTER_PAGE_LIMIT:
                break
            after = str((page[-1].get("user") or {}).get("id", after))

        with self._roster_lock:
            self._roster = roster
        logger.debug("roster refreshed", extra={"extra_fields": {"members": len(roster)}})
        return len(roster)

    def resolve_member(self, user_id: str) -> Member:
        with self._roster_lock:
            cached = self._roster.get(user_id)
        if cached is not None:
            return cached

        try:
            response = request_with_retry(
                "GET",
                self._guild_url(f"/members/{quote(user_id, safe='')}"),
                headers=self._headers(),
                allowed_statuses={404},
            )
        except SyncHTTPError as exc:
            raise MembershipError(f"member lookup failed: {_error_message(exc)}") from exc
        if response.status_code == 404:
            raise MemberNotFound(user_id, response_error_message(response))

        member = _member_from_payload(response.json())
        with self._roster_lock:
            self._roster[member.user_id] = member
        return member

    def grant_role(self, user_id: str, role_id: str, reason: str) -> None:
        member = self.resolve_member(user_id)
        try:
            request_with_retry(
                "PUT",
                self._guild_url(f"/members/{quote(member.user_id, safe='')}/roles/{quote(role_id, safe='')}"),
                headers=self._headers(reason),
            )
        except SyncHTTPStatusError as exc:
            raise RoleGrantError(_error_message(exc), status_code=exc.status_code) from exc
        except SyncHTTPError as exc:
            raise RoleGrantError(str(exc)) from exc

        with self._roster_lock:
            if role_id not in member.roles:
                self._roster[member.user_id] = member.model_copy(update={"roles": [*member.roles, role_id]})
