from __future__ import annotations

from approvalsync.core.notifications.schemas import (
    COLOR_FAILURE,
    COLOR_SUCCESS,
    COLOR_WARNING,
    PLACEHOLDER,
    Report,
)
from approvalsync.core.registry.schemas import ApprovalRecord

MAX_ERROR_DETAIL = 900


def truncate_detail(text: str, limit: int = MAX_ERROR_DETAIL) -> str:
    return (text or PLACEHOLDER)[:limit]


def missing_identity_report(record: ApprovalRecord) -> Report:
    report = Report(
        kind="missing_identity",
        title="Approved without user id (cannot grant role)",
        description="The approved application has **no Discord ID**. Fix the form/API so it sends `userId`.",
        color=COLOR_WARNING,
    )
    return (
        report.add_field("Form ID", record.id)
        .add_field("Nick", record.nickname)
        .add_field("Token", record.token)
    )


def granted_report(record: ApprovalRecord, footer: str | None = None) -> Report:
    mention = f"<@{record.user_id}>"
    report = Report(
        kind="granted",
        title="Approved in panel: role granted",
        description=f"Role granted to {mention}",
        footer=footer,
        color=COLOR_SUCCESS,
    )
    return (
        report.add_field("Discord", record.display_handle or mention)
        .add_field("Nick", record.nickname)
        .add_field("Age", record.age)
        .add_field("Form ID", record.id)
    )


def failed_report(record: ApprovalRecord, reason: str) -> Report:
    report = Report(
        kind="failed",
        title="Failed to grant role",
        description=f"Could not grant the role to <@{record.user_id}>",
        color=COLOR_FAILURE,
    )
    return (
        report.add_field("Error", truncate_detail(reason), inline=False)
        .add_field("Form ID", record.id)
        .add_field("Nick", record.nickname)
    )
