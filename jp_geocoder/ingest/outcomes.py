"""Per-file outcomes and the run aggregate built from them."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

SKIPPED = "skipped"
LEDGERED = "ledgered"
FAILED = "failed"

STAGE_LEDGER_CHECK = "ledger_check"
STAGE_PARSE = "parse"
STAGE_INSERT = "insert"
STAGE_CANCELLED = "cancelled"


@dataclass(frozen=True)
class FileOutcome:
    file_id: str
    status: str
    records: int = 0
    stage: str | None = None
    error_code: str | None = None
    message: str | None = None
    ledger_written: bool = False

    @property
    def failed(self) -> bool:
        return self.status == FAILED

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ImportRun:
    """Counts for one invocation. Lives only as long as the run; never stored."""

    run_id: str
    mode: str
    outcomes: list[FileOutcome] = field(default_factory=list)
    files_discovered: int = 0
    cancelled: bool = False

    def record(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def files_processed(self) -> int:
        return self._count(LEDGERED)

    @property
    def files_failed(self) -> int:
        return self._count(FAILED)

    @property
    def files_skipped(self) -> int:
        return self._count(SKIPPED)

    @property
    def total_records(self) -> int:
        return sum(outcome.records for outcome in self.outcomes if outcome.status == LEDGERED)

    @property
    def ledger_warnings(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == LEDGERED and not outcome.ledger_written)

    def failures_by_stage(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for outcome in self.outcomes:
            if outcome.failed:
                stage = outcome.stage or "unknown"
                counts[stage] = counts.get(stage, 0) + 1
        return dict(sorted(counts.items()))

    def summary(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "mode": self.mode,
            "files_discovered": self.files_discovered,
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "files_skipped": self.files_skipped,
            "total_records": self.total_records,
            "ledger_warnings": self.ledger_warnings,
            "failures_by_stage": self.failures_by_stage(),
            "cancelled": self.cancelled,
        }
