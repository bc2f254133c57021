from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from approvalsync.core.errors import MembershipError, RegistryError
from approvalsync.core.logging.context import log_context
from approvalsync.core.logging.redact import redact_string
from approvalsync.core.membership.base import MembershipGateway
from approvalsync.core.notifications.notifier import Notifier
from approvalsync.core.notifications.schemas import Report
from approvalsync.core.registry.client import ApprovalRegistry
from approvalsync.core.registry.schemas import ApprovalRecord

from .outcomes import Failed, Granted, MissingIdentity, Outcome, PassReport
from .reports import failed_report, granted_report, missing_identity_report, truncate_detail

DEFAULT_GRANT_REASON = "Approved in panel (API)"


class Reconciler:
    """Applies the approved feed to guild membership, one pass at a time.

    A record is acknowledged upstream only when its role grant succeeded in
    the same pass. Everything else stays pending and is retried next pass.
    Callers are expected to serialize run_pass through a PassGuard.
    """

    def __init__(
        self,
        registry: ApprovalRegistry,
        gateway: MembershipGateway,
        notifier: Notifier,
        role_id: str,
        grant_reason: str = DEFAULT_GRANT_REASON,
        report_footer: str | None = None,
    ) -> None:
        self.registry = registry
        self.gateway = gateway
        self.notifier = notifier
        self.role_id = role_id
        self.grant_reason = grant_reason
        self.report_footer = report_footer
        self.logger = logging.getLogger("approvalsync.reconcile")

    def run_pass(self) -> PassReport:
        report = PassReport(pass_id=uuid4().hex[:12])
        with log_context(pass_id=report.pass_id):
            try:
                self._refresh_roster()
                try:
                    records = self.registry.list_approved()
                except RegistryError as exc:
                    report.aborted = True
                    report.error = redact_string(str(exc))
                    self.logger.error("approved feed fetch failed; pass aborted: %s", exc)
                    return report

                report.fetched = len(records)
                for record in records:
                    self._process(record, report)
            except Exception as exc:
                report.aborted = True
                report.error = redact_string(f"{exc.__class__.__name__}: {exc}")
                self.logger.exception("reconciliation pass aborted")
            finally:
                report.finished_at = datetime.now(timezone.utc)
                self.logger.info("reconciliation pass finished", extra={"extra_fields": report.summary()})
        return report

    def _refresh_roster(self) -> None:
        try:
            self.gateway.refresh_roster()
        except Exception as exc:
            self.logger.warning("roster refresh failed, continuing with direct lookups: %s", exc)

    def _process(self, record: ApprovalRecord, report: PassReport) -> None:
        if not record.id:
            report.skipped += 1
            return

        with log_context(form_id=record.id, user_id=record.user_id):
            if not record.user_id:
                self.logger.warning("approved record has no user id")
                self._notify(missing_identity_report(record))
                report.record(record.id, None, MissingIdentity())
                return

            outcome = self._grant(record.user_id)
            if isinstance(outcome, Failed):
                self._notify(failed_report(record, outcome.reason))
                report.record(record.id, record.user_id, outcome)
                return

            self._notify(granted_report(record, footer=self.report_footer))
            acknowledged = self._acknowledge(record)
            if acknowledged:
                report.acknowledged += 1
            else:
                report.ack_failures += 1
            report.record(record.id, record.user_id, outcome, acknowledged=acknowledged)

    def _grant(self, user_id: str) -> Outcome:
        try:
            self.gateway.resolve_member(user_id)
            self.gateway.grant_role(user_id, self.role_id, self.grant_reason)
        except MembershipError as exc:
            self.logger.warning("role grant failed: %s", exc)
            return Failed(reason=self._reason(exc))
        except Exception as exc:
            self.logger.exception("role grant raised unexpectedly")
            return Failed(reason=self._reason(exc))
        self.logger.info("role granted")
        return Granted()

    def _acknowledge(self, record: ApprovalRecord) -> bool:
        try:
            self.registry.mark_done(record.id)
        except RegistryError as exc:
            # The next pass re-grants (a no-op on the platform) and retries the ack.
            self.logger.error("mark-done failed after successful grant: %s", exc)
            return False
        except Exception:
            self.logger.exception("mark-done raised unexpectedly after successful grant")
            return False
        return True

    def _notify(self, report: Report) -> None:
        try:
            self.notifier.send(report)
        except Exception:
            self.logger.exception("report delivery failed")

    @staticmethod
    def _reason(exc: Exception) -> str:
        return truncate_detail(redact_string(str(exc) or exc.__class__.__name__))
