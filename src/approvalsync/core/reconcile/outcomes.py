from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class MissingIdentity:
    kind: str = "missing_identity"


@dataclass(frozen=True)
class Granted:
    kind: str = "granted"


@dataclass(frozen=True)
class Failed:
    reason: str
    kind: str = "failed"


Outcome = Union[MissingIdentity, Granted, Failed]


class OutcomeEntry(BaseModel):
    form_id: str
    user_id: str | None = None
    outcome: str
    reason: str | None = None
    acknowledged: bool = False


class PassReport(BaseModel):
    pass_id: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    fetched: int = 0
    skipped: int = 0
    granted: int = 0
    failed: int = 0
    missing_identity: int = 0
    acknowledged: int = 0
    ack_failures: int = 0
    aborted: bool = False
    error: str | None = None
    outcomes: list[OutcomeEntry] = Field(default_factory=list)

    def record(self, form_id: str, user_id: str | None, outcome: Outcome, acknowledged: bool = False) -> None:
        if isinstance(outcome, Granted):
            self.granted += 1
        elif isinstance(outcome, Failed):
            self.failed += 1
        else:
            self.missing_identity += 1
        self.outcomes.append(
            OutcomeEntry(
                form_id=form_id,
                user_id=user_id,
                outcome=outcome.kind,
                reason=outcome.reason if isinstance(outcome, Failed) else None,
                acknowledged=acknowledged,
            )
        )

    def summary(self) -> dict[str, object]:
        return self.model_dump(mode="json", exclude={"outcomes"})
