from __future__ import annotations

from functools import lru_cache

from approvalsync.apps.wiring import build_scheduler
from approvalsync.core.config.settings import Settings, load_settings
from approvalsync.core.scheduler.scheduler import ReconcileScheduler


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def get_scheduler() -> ReconcileScheduler:
    return build_scheduler(get_settings())
