from __future__ import annotations

import logging
import signal
import sys
import time

from approvalsync.apps.wiring import build_scheduler
from approvalsync.core.config.settings import Settings, load_settings
from approvalsync.core.errors import ConfigError
from approvalsync.core.http.client import close_http_client
from approvalsync.core.logging import configure_logging

logger = logging.getLogger("approvalsync.worker")


class Worker:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.scheduler = build_scheduler(settings)
        self._running = True

    def _handle_signal(self, signum, frame) -> None:  # type: ignore[no-untyped-def]
        _ = frame
        logger.info("received signal %s; shutting down", signum)
        self._running = False

    def run_forever(self) -> None:
        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGTERM, self._handle_signal)
        self.scheduler.trigger()
        self.scheduler.start()
        try:
            while self._running:
                time.sleep(0.5)
        finally:
            self.scheduler.shutdown()
            close_http_client()
            logger.info("scheduler stopped")


def run() -> None:
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"[worker] configuration error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    configure_logging(settings)
    Worker(settings).run_forever()


if __name__ == "__main__":
    run()
