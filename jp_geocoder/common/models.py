"""Data models shared by ingestion and resolution."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class LocationRecord:
    prefecture: str
    municipality: str
    address_1: str
    address_2: str
    block_lot: str
    latitude: float
    longitude: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Location:
    """A stored record as returned by the query gateway."""

    id: int
    prefecture: str
    municipality: str
    address_1: str
    address_2: str
    block_lot: str
    latitude: float
    longitude: float

    @classmethod
    def from_record(cls, location_id: int, record: LocationRecord) -> "Location":
        return cls(id=location_id, **record.to_dict())

    def to_record(self) -> LocationRecord:
        return LocationRecord(
            prefecture=self.prefecture,
            municipality=self.municipality,
            address_1=self.address_1,
            address_2=self.address_2,
            block_lot=self.block_lot,
            latitude=self.latitude,
            longitude=self.longitude,
        )

    def to_dict(self) -> dict[str, Any]:
        # Wire names used by the HTTP surface.
        return {
            "id": self.id,
            "prefecture": self.prefecture,
            "municipality": self.municipality,
            "address1": self.address_1,
            "address2": self.address_2,
            "block_lot": self.block_lot,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }
