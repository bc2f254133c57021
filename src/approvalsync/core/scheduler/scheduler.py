from __future__ import annotations

import logging
import threading

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from approvalsync.core.config.settings import MIN_POLL_MS
from approvalsync.core.reconcile.outcomes import PassReport
from approvalsync.core.reconcile.reconciler import Reconciler

from .guard import PassGuard

RECONCILE_JOB_ID = "reconcile:approved"


class ReconcileScheduler:
    def __init__(self, reconciler: Reconciler, poll_ms: int, guard: PassGuard | None = None) -> None:
        self.reconciler = reconciler
        self.interval_ms = max(MIN_POLL_MS, poll_ms)
        self.guard = guard or PassGuard()
        self.scheduler = BackgroundScheduler(jobstores={"default": MemoryJobStore()}, timezone="UTC")
        self.logger = logging.getLogger("approvalsync.scheduler")
        self._last_report: PassReport | None = None
        self._report_lock = threading.Lock()
        self._started = False

    @property
    def last_report(self) -> PassReport | None:
        with self._report_lock:
            return self._last_report

    @property
    def running(self) -> bool:
        return self.guard.running

    def trigger(self) -> PassReport | None:
        """Run one pass now unless one is already in progress."""
        report = self.guard.try_run(self.reconciler.run_pass)
        if report is None:
            self.logger.info("reconciliation pass already running; trigger skipped")
            return None
        with self._report_lock:
            self._last_report = report
        return report

    def start(self) -> None:
        if self._started:
            return
        self.scheduler.add_job(
            self.trigger,
            trigger="interval",
            id=RECONCILE_JOB_ID,
            seconds=self.interval_ms / 1000.0,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        self._started = True
        self.logger.info("reconciliation loop active, interval %d ms", self.interval_ms)

    def shutdown(self) -> None:
        if self._started:
            self.scheduler.shutdown(wait=False)
            self._started = False
