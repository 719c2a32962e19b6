"""Forward and reverse geocoding on top of the query gateway."""

from __future__ import annotations

import math

from jp_geocoder.common.constants import DEFAULT_REVERSE_RADIUS_M, DEFAULT_SEARCH_LIMIT
from jp_geocoder.common.errors import InvalidArgument, StoreError, UpstreamError
from jp_geocoder.common.models import Location
from jp_geocoder.store.base import QueryGateway


class GeocodeService:
    def __init__(self, gateway: QueryGateway, *, limit: int = DEFAULT_SEARCH_LIMIT) -> None:
        self.gateway = gateway
        self.limit = limit

    def geocode(self, address: str) -> list[Location]:
        if address is None or not address.strip():
            raise InvalidArgument("address cannot be empty")

        try:
            return list(self.gateway.search_by_text(address.strip(), limit=self.limit))
        except StoreError as exc:
            raise UpstreamError(f"failed to search locations: {exc}") from exc


class ReverseGeocodeService:
    def __init__(self, gateway: QueryGateway, *, radius_m: float = DEFAULT_REVERSE_RADIUS_M) -> None:
        self.gateway = gateway
        self.radius_m = radius_m

    def reverse_geocode(self, latitude: float, longitude: float) -> Location | None:
        """Nearest stored location within the radius; None means no match."""
        if not math.isfinite(latitude) or not -90 <= latitude <= 90:
            raise InvalidArgument(f"invalid latitude: {latitude}")
        if not math.isfinite(longitude) or not -180 <= longitude <= 180:
            raise InvalidArgument(f"invalid longitude: {longitude}")

        try:
            return self.gateway.find_nearest(latitude, longitude, radius_m=self.radius_m)
        except StoreError as exc:
            raise UpstreamError(f"failed to find nearest location: {exc}") from exc
