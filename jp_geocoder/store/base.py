"""Capabilities the core expects from the reference store."""

from __future__ import annotations

from typing import Iterable, Protocol

from jp_geocoder.common.models import Location, LocationRecord


class ReferenceStore(Protocol):
    """Write side: atomic bulk insert plus the processed-file ledger."""

    def ensure_schema(self) -> None: ...

    def bulk_insert(self, records: Iterable[LocationRecord]) -> int: ...

    def is_file_processed(self, file_id: str) -> bool: ...

    def mark_file_processed(self, file_id: str, record_count: int) -> None: ...

    def count_rows(self) -> int: ...

    def sample_row(self) -> str | None: ...

    def cancel(self) -> None: ...

    def close(self) -> None: ...


class QueryGateway(Protocol):
    """Read side: rank-search by text and nearest-point search by coordinate."""

    def search_by_text(self, query: str, *, limit: int) -> list[Location]: ...

    def find_nearest(self, latitude: float, longitude: float, *, radius_m: float) -> Location | None: ...
