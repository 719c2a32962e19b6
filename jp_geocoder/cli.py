"""Import address point CSV exports into the geocoding reference store."""

from __future__ import annotations

import argparse
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Iterator

from jp_geocoder.common.config_loader import load_config
from jp_geocoder.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS
from jp_geocoder.common.errors import GeocoderError, StoreError
from jp_geocoder.common.ids import generate_run_id
from jp_geocoder.common.logging import build_logger, log_event
from jp_geocoder.ingest.cancel import CancelToken
from jp_geocoder.ingest.coordinator import MODE_DIRECTORY, MODE_FILE, IngestionCoordinator
from jp_geocoder.ingest.outcomes import ImportRun
from jp_geocoder.ingest.verify import verify_import
from jp_geocoder.store.base import ReferenceStore


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", default=None, help="Path to the CSV file to import")
    source.add_argument("--directory", default=None, help="Path to the directory containing CSV files to import")
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--timeout", type=float, default=None, help="Overall run deadline in seconds")
    return parser.parse_args(argv)


def open_store(config: dict) -> ReferenceStore:
    if config["database"]["backend"] == "memory":
        from jp_geocoder.store.memory import MemoryReferenceStore

        return MemoryReferenceStore()

    from jp_geocoder.store.postgres import PostgresReferenceStore

    return PostgresReferenceStore.from_config(config)


@contextlib.contextmanager
def cancel_on_signals(token: CancelToken) -> Iterator[None]:
    def _handler(signum, _frame) -> None:
        token.cancel(f"interrupted by {signal.Signals(signum).name}")

    previous = {sig: signal.signal(sig, _handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    token.arm()
    try:
        yield
    finally:
        token.disarm()
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def format_summary(run: ImportRun) -> str:
    line = (
        f"Import completed: {run.files_processed} files processed, {run.files_failed} files failed, "
        f"{run.files_skipped} files skipped, {run.total_records} total records imported"
    )
    if run.cancelled:
        line += " (cancelled)"
    return line


def _run_single_file(
    coordinator: IngestionCoordinator,
    store: ReferenceStore,
    path: Path,
    logger: logging.Logger,
    run_id: str,
) -> int:
    run = coordinator.run_file(path)
    outcome = run.outcomes[0]
    if outcome.failed:
        print(f"Error importing {path}: {outcome.message}", file=sys.stderr)
        return EXIT_HARD_FAIL

    try:
        total, sample = verify_import(store, outcome.records)
    except StoreError as exc:
        log_event(
            logger,
            f"error verifying import: {exc}",
            run_id=run_id,
            mode=MODE_FILE,
            file=outcome.file_id,
            event="VERIFY_FAILED",
            status="error",
            error_code=exc.error_code,
        )
        print(f"Error verifying import: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL

    log_event(
        logger,
        f"verified: {total} total records in store, sample geom {sample}",
        run_id=run_id,
        mode=MODE_FILE,
        file=outcome.file_id,
        event="VERIFY_OK",
        status="ok",
        records=outcome.records,
    )
    print(f"Successfully imported {outcome.records} records ({total} total records in store)")
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    config = load_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)

    log_dir = config["logging"]["log_dir"]
    logger = build_logger(run_id, log_dir=Path(log_dir) if log_dir else None, level=args.log_level)
    mode = MODE_FILE if args.file else MODE_DIRECTORY

    store = None
    try:
        store = open_store(config)
        store.ensure_schema()
    except StoreError as exc:
        if store is not None:
            store.close()
        log_event(
            logger,
            f"reference store unavailable: {exc}",
            run_id=run_id,
            mode=mode,
            event="RUN_FAILED",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    token = CancelToken(deadline_seconds=args.timeout)
    try:
        with cancel_on_signals(token):
            coordinator = IngestionCoordinator(
                store,
                logger=logger,
                run_id=run_id,
                encoding=config["ingest"]["encoding"],
                file_extension=config["ingest"]["file_extension"],
                cancel_token=token,
            )
            if args.file:
                return _run_single_file(coordinator, store, Path(args.file), logger, run_id)

            run = coordinator.run_directory(Path(args.directory))
            print(format_summary(run))
            return EXIT_SUCCESS
    except GeocoderError as exc:
        log_event(
            logger,
            f"import aborted: {exc}",
            run_id=run_id,
            mode=mode,
            event="RUN_FAILED",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    finally:
        store.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run_command(args)
    except GeocoderError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
