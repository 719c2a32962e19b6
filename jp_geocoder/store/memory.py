"""In-process store used for local trial runs and tests.

Text search is a plain substring match ranked by how often the query terms
occur; nearest-point search uses geodesic distance on the WGS84 ellipsoid.
"""

from __future__ import annotations

from typing import Iterable

from pyproj import Geod

from jp_geocoder.common.models import Location, LocationRecord
from jp_geocoder.common.time_utils import utc_now

_GEOD = Geod(ellps="WGS84")


class MemoryReferenceStore:
    def __init__(self) -> None:
        self.locations: list[Location] = []
        self.ledger: dict[str, dict] = {}
        self._next_id = 1

    def ensure_schema(self) -> None:
        return None

    def close(self) -> None:
        return None

    def cancel(self) -> None:
        return None

    def bulk_insert(self, records: Iterable[LocationRecord]) -> int:
        # Materialise first so a failing iterator leaves the store untouched.
        batch = list(records)
        staged = [Location.from_record(self._next_id + offset, record) for offset, record in enumerate(batch)]
        self.locations.extend(staged)
        self._next_id += len(staged)
        return len(staged)

    def is_file_processed(self, file_id: str) -> bool:
        return file_id in self.ledger

    def mark_file_processed(self, file_id: str, record_count: int) -> None:
        if file_id in self.ledger:
            return
        self.ledger[file_id] = {"processed_at": utc_now(), "record_count": record_count}

    def count_rows(self) -> int:
        return len(self.locations)

    def sample_row(self) -> str | None:
        if not self.locations:
            return None
        first = self.locations[0]
        return f"POINT({first.longitude!r} {first.latitude!r})"

    def search_by_text(self, query: str, *, limit: int) -> list[Location]:
        terms = [term for term in query.split() if term]
        scored: list[tuple[int, int, Location]] = []
        for location in self.locations:
            haystack = "".join(
                (location.prefecture, location.municipality, location.address_1, location.address_2)
            )
            if not all(term in haystack for term in terms):
                continue
            score = sum(haystack.count(term) * len(term) for term in terms)
            scored.append((-score, location.id, location))
        scored.sort(key=lambda item: (item[0], item[1]))
        return [location for _score, _id, location in scored[:limit]]

    def find_nearest(self, latitude: float, longitude: float, *, radius_m: float) -> Location | None:
        best: tuple[float, int, Location] | None = None
        for location in self.locations:
            _fwd, _back, distance = _GEOD.inv(longitude, latitude, location.longitude, location.latitude)
            if distance > radius_m:
                continue
            candidate = (distance, location.id, location)
            if best is None or candidate[:2] < best[:2]:
                best = candidate
        return best[2] if best else None
