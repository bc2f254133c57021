from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field


class Member(BaseModel):
    user_id: str
    username: str | None = None
    nick: str | None = None
    roles: list[str] = Field(default_factory=list)


class MembershipGateway(Protocol):
    def refresh_roster(self) -> int: ...

    def resolve_member(self, user_id: str) -> Member: ...

    def grant_role(self, user_id: str, role_id: str, reason: str) -> None: ...
