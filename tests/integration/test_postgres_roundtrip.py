"""Round trips against a live PostGIS database; set GEOCODER_TEST_DSN to run."""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

import pytest

from address_fixtures import write_address_csv
from jp_geocoder.ingest.coordinator import IngestionCoordinator
from jp_geocoder.resolve.service import GeocodeService, ReverseGeocodeService

TEST_DSN = os.environ.get("GEOCODER_TEST_DSN")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not TEST_DSN, reason="GEOCODER_TEST_DSN not set"),
]


@pytest.fixture
def database_config() -> dict:
    return {
        "backend": "postgres",
        "dsn": TEST_DSN,
        "connect_timeout_seconds": 5,
        "statement_timeout_ms": 30000,
        "connect_attempts": 1,
    }


@pytest.fixture
def store(database_config):
    from jp_geocoder.store.postgres import PostgresReferenceStore, connect

    with PostgresReferenceStore(connect(database_config)) as store:
        store.ensure_schema()
        yield store


def test_ingest_then_query_round_trip(tmp_path: Path, store, database_config):
    from jp_geocoder.store.postgres import PostgresQueryGateway

    # Unique municipality so the assertions hold on a shared database.
    marker = f"試験区{uuid.uuid4().hex[:8]}"
    root = tmp_path / "data"
    write_address_csv(root / "a.csv", [f"東京都,{marker},丸の内,,,9,0,0,0,35.681236,139.767125"])

    coordinator = IngestionCoordinator(store, logger=logging.getLogger("geocoder.test"), run_id="run-pg")
    first = coordinator.run_directory(root)
    second = coordinator.run_directory(root)

    assert first.files_processed == 1
    assert second.files_skipped == 1
    assert second.total_records == 0

    gateway = PostgresQueryGateway(database_config)
    matches = GeocodeService(gateway).geocode(marker)
    assert [(m.prefecture, m.municipality, m.address_1) for m in matches] == [("東京都", marker, "丸の内")]
    assert matches[0].latitude == pytest.approx(35.681236)
    assert matches[0].longitude == pytest.approx(139.767125)

    nearest = ReverseGeocodeService(gateway).reverse_geocode(35.681236, 139.767125)
    assert nearest is not None
    assert nearest.latitude == pytest.approx(35.681236)


def test_mark_file_processed_is_idempotent(store):
    file_id = f"ledger-test-{uuid.uuid4().hex}.csv"

    store.mark_file_processed(file_id, 3)
    store.mark_file_processed(file_id, 5)

    assert store.is_file_processed(file_id) is True
