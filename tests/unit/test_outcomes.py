from jp_geocoder.ingest.outcomes import FAILED, LEDGERED, SKIPPED, FileOutcome, ImportRun


def test_import_run_counts_by_outcome():
    run = ImportRun(run_id="run-1", mode="directory", files_discovered=5)
    run.record(FileOutcome("a.csv", LEDGERED, records=3, ledger_written=True))
    run.record(FileOutcome("b.csv", LEDGERED, records=2, ledger_written=False))
    run.record(FileOutcome("c.csv", SKIPPED))
    run.record(FileOutcome("d.csv", FAILED, stage="parse", error_code="MALFORMED_RECORD"))
    run.record(FileOutcome("e.csv", FAILED, stage="insert", error_code="STORE_ERROR"))

    summary = run.summary()

    assert summary["files_processed"] == 2
    assert summary["files_failed"] == 2
    assert summary["files_skipped"] == 1
    assert summary["total_records"] == 5
    assert summary["ledger_warnings"] == 1
    assert summary["failures_by_stage"] == {"insert": 1, "parse": 1}
    assert summary["cancelled"] is False


def test_failed_outcome_records_do_not_count():
    run = ImportRun(run_id="run-1", mode="directory")
    run.record(FileOutcome("a.csv", FAILED, records=9, stage="insert"))
    assert run.total_records == 0
    assert run.outcomes[0].failed is True
    assert run.outcomes[0].to_dict()["stage"] == "insert"
