from __future__ import annotations

from approvalsync.core.config.settings import Settings
from approvalsync.core.membership.discord import DiscordGuildGateway
from approvalsync.core.notifications.notifier import build_notification_router
from approvalsync.core.reconcile.reconciler import Reconciler
from approvalsync.core.registry.client import RegistryClient
from approvalsync.core.scheduler.scheduler import ReconcileScheduler


def build_reconciler(settings: Settings) -> Reconciler:
    return Reconciler(
        registry=RegistryClient(base_url=settings.api_base, api_key=settings.api_key),
        gateway=DiscordGuildGateway(
            bot_token=settings.bot_token,
            guild_id=settings.guild_id,
            api_base=settings.discord_api_base,
        ),
        notifier=build_notification_router(settings),
        role_id=settings.role_id,
        grant_reason=settings.grant_reason,
        report_footer=settings.report_footer,
    )


def build_scheduler(settings: Settings) -> ReconcileScheduler:
    return ReconcileScheduler(reconciler=build_reconciler(settings), poll_ms=settings.poll_ms)
