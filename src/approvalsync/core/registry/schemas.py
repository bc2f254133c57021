from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

# Feed producers have used several names for the platform user id over time.
USER_ID_FIELDS = ("userId", "discordId", "discord_id", "memberId")


class ApprovalRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str | None = None
    display_handle: str | None = None
    nickname: str | None = None
    age: int | str | None = None
    token: str | None = None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def normalize_record(item: Mapping[str, Any]) -> ApprovalRecord:
    """Map one raw feed item onto an ApprovalRecord.

    The user id is the first non-empty value among USER_ID_FIELDS. Missing
    values come back as None; a missing id comes back as an empty string so
    callers can decide to skip it.
    """
    user_id = None
    for field in USER_ID_FIELDS:
        candidate = _text(item.get(field))
        if candidate:
            user_id = candidate
            break

    age = item.get("idade", item.get("age"))
    if isinstance(age, bool) or (age is not None and not isinstance(age, (int, str))):
        age = str(age)

    return ApprovalRecord(
        id=_text(item.get("id")),
        user_id=user_id,
        display_handle=_optional_text(item.get("discordTag")),
        nickname=_optional_text(item.get("nick") or item.get("nickname")),
        age=age,
        token=_optional_text(item.get("token")),
    )
