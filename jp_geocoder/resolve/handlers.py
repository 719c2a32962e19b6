"""Request handlers for the geocoding endpoints.

They are framework-neutral: each takes the query-string mapping and
returns ``(status_code, payload)``, so any router can mount them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from jp_geocoder.common.coordinates import parse_decimal
from jp_geocoder.common.errors import ConfigError, InvalidArgument, UpstreamError
from jp_geocoder.resolve.service import GeocodeService, ReverseGeocodeService
from jp_geocoder.store.base import QueryGateway

logger = logging.getLogger(__name__)

MISSING_QUERY = "missing required query parameter 'q'"
MISSING_COORDINATES = "missing required query parameters 'lat' and 'lon'"
INVALID_LATITUDE_FORMAT = "invalid latitude format"
INVALID_LONGITUDE_FORMAT = "invalid longitude format"
NOT_FOUND = "no location found near the given coordinates"
INTERNAL_ERROR = "internal server error"

Response = tuple[int, Any]


@dataclass(frozen=True)
class Services:
    geocode: GeocodeService
    reverse_geocode: ReverseGeocodeService


def build_services(config: dict, gateway: QueryGateway | None = None) -> Services:
    if gateway is None:
        gateway = _gateway_from_config(config)
    query_cfg = config["query"]
    return Services(
        geocode=GeocodeService(gateway, limit=int(query_cfg["search_limit"])),
        reverse_geocode=ReverseGeocodeService(gateway, radius_m=float(query_cfg["reverse_radius_m"])),
    )


def _gateway_from_config(config: dict) -> QueryGateway:
    if config["database"]["backend"] == "memory":
        # An in-process store only holds what this process imported.
        raise ConfigError("the memory backend needs an explicit gateway")

    from jp_geocoder.store.postgres import PostgresQueryGateway

    return PostgresQueryGateway(config["database"], text_search_config=config["query"]["text_search_config"])


def _error(status: int, message: str) -> Response:
    return status, {"error": message}


def handle_geocode(params: Mapping[str, str], service: GeocodeService) -> Response:
    query = (params.get("q") or "").strip()
    if not query:
        return _error(400, MISSING_QUERY)

    try:
        locations = service.geocode(query)
    except InvalidArgument as exc:
        return _error(400, str(exc))
    except UpstreamError:
        logger.exception("geocode failed for query %r", query)
        return _error(500, INTERNAL_ERROR)

    return 200, [location.to_dict() for location in locations]


def handle_reverse_geocode(params: Mapping[str, str], service: ReverseGeocodeService) -> Response:
    lat_raw = (params.get("lat") or "").strip()
    lon_raw = (params.get("lon") or "").strip()
    if not lat_raw or not lon_raw:
        return _error(400, MISSING_COORDINATES)

    latitude = parse_decimal(lat_raw)
    if latitude is None:
        return _error(400, INVALID_LATITUDE_FORMAT)
    longitude = parse_decimal(lon_raw)
    if longitude is None:
        return _error(400, INVALID_LONGITUDE_FORMAT)

    try:
        location = service.reverse_geocode(latitude, longitude)
    except InvalidArgument as exc:
        return _error(400, str(exc))
    except UpstreamError:
        logger.exception("reverse geocode failed for (%s, %s)", latitude, longitude)
        return _error(500, INTERNAL_ERROR)

    if location is None:
        return _error(404, NOT_FOUND)
    return 200, location.to_dict()


def handle_health() -> Response:
    return 200, {"status": "ok"}
