from __future__ import annotations

from approvalsync.core.notifications.schemas import Report


class ConsoleNotifier:
    def send(self, report: Report) -> None:
        print(f"[report] {report.title}\n{report.as_text()}")
