from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from .channels.console import ConsoleNotifier
from .channels.discord import DiscordChannelNotifier
from .schemas import Report

if TYPE_CHECKING:
    from approvalsync.core.config.settings import Settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, report: Report) -> None: ...


class NotificationRouter:
    def __init__(self, channels: list[Notifier]) -> None:
        self.channels = channels

    def send(self, report: Report) -> None:
        for channel in self.channels:
            try:
                channel.send(report)
            except Exception:
                logger.exception("notifier channel %s failed", type(channel).__name__)


def build_notification_router(settings: Settings) -> NotificationRouter:
    requested = settings.notifier_channels
    channels: list[Notifier] = []

    if "discord" in requested or not requested:
        channels.append(
            DiscordChannelNotifier(
                bot_token=settings.bot_token,
                channel_id=settings.log_channel_id,
                api_base=settings.discord_api_base,
            )
        )

    if "console" in requested:
        channels.append(ConsoleNotifier())

    if not channels:
        logger.warning("no known notifier in %r; falling back to console", settings.notifier)
        channels.append(ConsoleNotifier())

    return NotificationRouter(channels=channels)
