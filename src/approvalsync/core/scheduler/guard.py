from __future__ import annotations

import threading
from typing import Callable, TypeVar

T = TypeVar("T")


class PassGuard:
    """Non-blocking mutex: a call made while another is running is dropped, not queued."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def try_run(self, func: Callable[[], T]) -> T | None:
        if not self._lock.acquire(blocking=False):
            return None
        try:
            return func()
        finally:
            self._lock.release()
