from __future__ import annotations

import logging

from approvalsync.core.http.client import request_with_retry
from approvalsync.core.http.errors import SyncHTTPError
from approvalsync.core.notifications.schemas import Report

logger = logging.getLogger(__name__)


class DiscordChannelNotifier:
    """Posts reports as embeds to a fixed guild text channel."""

    def __init__(self, bot_token: str, channel_id: str, api_base: str = "https://discord.com/api/v10") -> None:
        self.bot_token = bot_token
        self.channel_id = channel_id
        self.api_base = api_base.rstrip("/")

    def send(self, report: Report) -> None:
        try:
            request_with_retry(
                "POST",
                f"{self.api_base}/channels/{self.channel_id}/messages",
                headers={"Authorization": f"Bot {self.bot_token}", "Content-Type": "application/json"},
                json={"embeds": [report.to_embed()]},
                timeout_override=5.0,
                retries=1,
            )
        except SyncHTTPError as exc:
            logger.warning("Discord report delivery failed: %s", exc)
