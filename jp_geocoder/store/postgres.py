"""PostgreSQL/PostGIS implementation of the store capabilities."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Iterable

import psycopg
from psycopg.rows import class_row
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from jp_geocoder.common.errors import StoreError, StoreUnavailable
from jp_geocoder.common.models import Location, LocationRecord
from jp_geocoder.store import sql as queries

logger = logging.getLogger(__name__)


def _connect_kwargs(database_config: dict) -> dict:
    kwargs: dict = {
        "connect_timeout": int(database_config["connect_timeout_seconds"]),
        "autocommit": True,
    }
    statement_timeout_ms = int(database_config.get("statement_timeout_ms") or 0)
    if statement_timeout_ms > 0:
        kwargs["options"] = f"-c statement_timeout={statement_timeout_ms}"
    return kwargs


def connect(database_config: dict) -> psycopg.Connection:
    """Open a connection, retrying transient failures; raises StoreUnavailable."""
    kwargs = _connect_kwargs(database_config)

    @retry(
        stop=stop_after_attempt(int(database_config["connect_attempts"])),
        wait=wait_exponential_jitter(initial=1.0, max=10.0, jitter=1.0),
        retry=retry_if_exception_type(psycopg.OperationalError),
        reraise=True,
    )
    def _wrapped() -> psycopg.Connection:
        return psycopg.connect(database_config["dsn"], **kwargs)

    try:
        return _wrapped()
    except psycopg.Error as exc:
        raise StoreUnavailable(f"cannot connect to reference store: {exc}") from exc


class PostgresReferenceStore:
    def __init__(self, conn: psycopg.Connection, *, text_search_config: str = "simple") -> None:
        self.conn = conn
        self.text_search_config = text_search_config

    @classmethod
    def from_config(cls, config: dict) -> "PostgresReferenceStore":
        return cls(connect(config["database"]), text_search_config=config["query"]["text_search_config"])

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "PostgresReferenceStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def ensure_schema(self) -> None:
        try:
            with self.conn.transaction():
                with self.conn.cursor() as cur:
                    for statement in queries.schema_statements(self.text_search_config):
                        cur.execute(statement)
        except psycopg.Error as exc:
            raise StoreError(f"failed to create tables: {exc}") from exc

    def bulk_insert(self, records: Iterable[LocationRecord]) -> int:
        inserted = 0
        try:
            # One transaction around the COPY: either every row lands or none do.
            with self.conn.transaction():
                with self.conn.cursor() as cur:
                    with cur.copy(queries.COPY_LOCATIONS) as copy:
                        for record in records:
                            copy.write_row(
                                (
                                    record.prefecture,
                                    record.municipality,
                                    record.address_1,
                                    record.address_2,
                                    record.block_lot,
                                    queries.point_ewkt(record.latitude, record.longitude),
                                )
                            )
                            inserted += 1
        except psycopg.Error as exc:
            raise StoreError(f"bulk insert failed: {exc}") from exc
        return inserted

    def is_file_processed(self, file_id: str) -> bool:
        try:
            with self.conn.cursor() as cur:
                cur.execute(queries.IS_FILE_PROCESSED, (file_id,))
                row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"failed to check ledger for {file_id}: {exc}") from exc
        return bool(row and row[0])

    def mark_file_processed(self, file_id: str, record_count: int) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(queries.MARK_FILE_PROCESSED, (file_id, record_count))
        except psycopg.Error as exc:
            raise StoreError(f"failed to mark {file_id} as processed: {exc}") from exc

    def count_rows(self) -> int:
        try:
            with self.conn.cursor() as cur:
                cur.execute(queries.COUNT_LOCATIONS)
                row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"failed to count records: {exc}") from exc
        return int(row[0]) if row else 0

    def sample_row(self) -> str | None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(queries.SAMPLE_GEOMETRY)
                row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"failed to check geom: {exc}") from exc
        return row[0] if row else None

    def cancel(self) -> None:
        try:
            self.conn.cancel()
        except psycopg.Error as exc:
            logger.warning("failed to cancel in-flight statement: %s", exc)


class PostgresQueryGateway:
    """Read-only gateway; one short-lived connection per call so request threads share nothing."""

    def __init__(self, database_config: dict, *, text_search_config: str = "simple") -> None:
        self.database_config = database_config
        self.text_search_config = text_search_config

    def _connect(self) -> psycopg.Connection:
        try:
            return psycopg.connect(self.database_config["dsn"], **_connect_kwargs(self.database_config))
        except psycopg.Error as exc:
            raise StoreUnavailable(f"cannot connect to reference store: {exc}") from exc

    def search_by_text(self, query: str, *, limit: int) -> list[Location]:
        params = {"config": self.text_search_config, "query": query, "limit": limit}
        try:
            with self._connect() as conn:
                with conn.cursor(row_factory=class_row(Location)) as cur:
                    cur.execute(queries.SEARCH_BY_TEXT, params)
                    return cur.fetchall()
        except psycopg.Error as exc:
            raise StoreError(f"failed to execute search query: {exc}") from exc

    def find_nearest(self, latitude: float, longitude: float, *, radius_m: float) -> Location | None:
        params = {"lat": latitude, "lon": longitude, "radius": radius_m}
        try:
            with self._connect() as conn:
                with conn.cursor(row_factory=class_row(Location)) as cur:
                    cur.execute(queries.FIND_NEAREST, params)
                    return cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"failed to execute spatial query: {exc}") from exc
