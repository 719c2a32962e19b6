"""Import orchestration with per-file fail-soft semantics.

Each file moves through ledger check, parse, bulk insert and ledger write,
and ends as skipped, ledgered or failed. A failed file never stops the run;
only losing the store at start-up does, and that happens before any
coordinator exists.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from jp_geocoder.common.errors import ImportCancelled, RecordError, StoreError
from jp_geocoder.common.logging import log_event
from jp_geocoder.common.time_utils import monotonic_ms
from jp_geocoder.ingest.cancel import CancelToken
from jp_geocoder.ingest.discovery import discover_files
from jp_geocoder.ingest.outcomes import (
    FAILED,
    LEDGERED,
    SKIPPED,
    STAGE_CANCELLED,
    STAGE_INSERT,
    STAGE_LEDGER_CHECK,
    STAGE_PARSE,
    FileOutcome,
    ImportRun,
)
from jp_geocoder.ingest.parser import parse_location_file
from jp_geocoder.store.base import ReferenceStore

MODE_FILE = "file"
MODE_DIRECTORY = "directory"


class IngestionCoordinator:
    def __init__(
        self,
        store: ReferenceStore,
        *,
        logger: logging.Logger,
        run_id: str,
        encoding: str = "utf-8-sig",
        file_extension: str = ".csv",
        cancel_token: CancelToken | None = None,
    ) -> None:
        self.store = store
        self.logger = logger
        self.run_id = run_id
        self.encoding = encoding
        self.file_extension = file_extension
        self.cancel_token = cancel_token or CancelToken()
        self.cancel_token.on_cancel(self.store.cancel)

    def _log(self, message: str, *, level: int = logging.INFO, **fields) -> None:
        log_event(self.logger, message, level=level, run_id=self.run_id, **fields)

    def _failed(self, file_id: str, stage: str, exc: BaseException, started: float, *, mode: str) -> FileOutcome:
        error_code = getattr(exc, "error_code", "UNEXPECTED_ERROR")
        if isinstance(exc, OSError):
            error_code = "FILE_UNREADABLE"
        outcome = FileOutcome(
            file_id=file_id,
            status=FAILED,
            stage=stage,
            error_code=error_code,
            message=str(exc),
        )
        self._log(
            f"{stage} failed for {file_id}: {exc}",
            level=logging.ERROR,
            mode=mode,
            file=file_id,
            event="FILE_FAILED",
            status="error",
            duration_ms=monotonic_ms(started),
            error_code=error_code,
        )
        return outcome

    def ingest_file(self, path: Path, *, check_ledger: bool = True, mode: str = MODE_DIRECTORY) -> FileOutcome:
        file_id = str(path)
        started = time.monotonic()

        if check_ledger:
            try:
                already_processed = self.store.is_file_processed(file_id)
            except StoreError as exc:
                return self._failed(file_id, STAGE_LEDGER_CHECK, exc, started, mode=mode)
            if already_processed:
                self._log(
                    f"skipping already processed file: {file_id}",
                    mode=mode,
                    file=file_id,
                    event="FILE_SKIPPED",
                    status="ok",
                )
                return FileOutcome(file_id=file_id, status=SKIPPED)

        try:
            records = parse_location_file(path, encoding=self.encoding)
        except (RecordError, OSError) as exc:
            return self._failed(file_id, STAGE_PARSE, exc, started, mode=mode)
        self._log(
            f"parsed {len(records)} records from {file_id}",
            mode=mode,
            file=file_id,
            event="FILE_PARSED",
            status="ok",
            records=len(records),
        )

        if self.cancel_token.cancelled:
            cancelled = ImportCancelled(self.cancel_token.reason or "cancelled")
            return self._failed(file_id, STAGE_CANCELLED, cancelled, started, mode=mode)

        try:
            inserted = self.store.bulk_insert(records)
        except StoreError as exc:
            if self.cancel_token.cancelled:
                cancelled = ImportCancelled(f"{self.cancel_token.reason or 'cancelled'}: {exc}")
                return self._failed(file_id, STAGE_CANCELLED, cancelled, started, mode=mode)
            return self._failed(file_id, STAGE_INSERT, exc, started, mode=mode)
        self._log(
            f"inserted {inserted} records from {file_id}",
            mode=mode,
            file=file_id,
            event="FILE_INSERTED",
            status="ok",
            records=inserted,
        )

        ledger_written = True
        try:
            self.store.mark_file_processed(file_id, inserted)
        except StoreError as exc:
            # Rows are already committed; the file still counts as processed.
            ledger_written = False
            self._log(
                f"error marking file as processed: {exc}",
                level=logging.WARNING,
                mode=mode,
                file=file_id,
                event="LEDGER_WRITE_FAILED",
                status="warning",
                error_code=exc.error_code,
            )

        self._log(
            f"successfully processed {file_id} ({inserted} records)",
            mode=mode,
            file=file_id,
            event="FILE_LEDGERED",
            status="ok",
            records=inserted,
            duration_ms=monotonic_ms(started),
        )
        return FileOutcome(file_id=file_id, status=LEDGERED, records=inserted, ledger_written=ledger_written)

    def run_directory(self, root: Path) -> ImportRun:
        run = ImportRun(run_id=self.run_id, mode=MODE_DIRECTORY)
        self._log(f"starting import from directory: {root}", mode=MODE_DIRECTORY, event="RUN_START", status="ok")

        files = discover_files(root, self.file_extension)
        run.files_discovered = len(files)
        self._log(
            f"found {len(files)} {self.file_extension} files to process",
            mode=MODE_DIRECTORY,
            event="FILES_DISCOVERED",
            status="ok",
        )

        for path in files:
            if self.cancel_token.cancelled:
                break
            started = time.monotonic()
            try:
                outcome = self.ingest_file(path, check_ledger=True, mode=MODE_DIRECTORY)
            except Exception as exc:
                outcome = self._failed(str(path), "unexpected", exc, started, mode=MODE_DIRECTORY)
            run.record(outcome)

        self._finish(run)
        return run

    def run_file(self, path: Path) -> ImportRun:
        run = ImportRun(run_id=self.run_id, mode=MODE_FILE, files_discovered=1)
        self._log(f"starting import from file: {path}", mode=MODE_FILE, event="RUN_START", status="ok")
        run.record(self.ingest_file(Path(path), check_ledger=False, mode=MODE_FILE))
        self._finish(run)
        return run

    def _finish(self, run: ImportRun) -> None:
        if self.cancel_token.cancelled:
            run.cancelled = True
            self._log(
                f"import cancelled: {self.cancel_token.reason}",
                level=logging.WARNING,
                mode=run.mode,
                event="RUN_CANCELLED",
                status="warning",
                error_code="CANCELLED",
            )
        self._log(
            f"import completed: {run.files_processed} files processed, {run.files_failed} files failed, "
            f"{run.files_skipped} files skipped, {run.total_records} total records imported",
            mode=run.mode,
            event="RUN_SUMMARY",
            status="error" if run.files_failed else "ok",
            records=run.total_records,
        )
