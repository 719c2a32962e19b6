"""Domain errors and failure typing."""

from __future__ import annotations


class GeocoderError(Exception):
    """Base class for geocoder failures."""

    error_code = "GEOCODER_ERROR"


class ConfigError(GeocoderError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class InvalidArgument(GeocoderError):
    """Raised for bad caller input. Never retried."""

    error_code = "INVALID_ARGUMENT"


class RecordError(GeocoderError):
    """Raised when an input file cannot be turned into records."""

    error_code = "RECORD_ERROR"

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


class MalformedRecord(RecordError):
    error_code = "MALFORMED_RECORD"

    def __init__(self, message: str, *, row_length: int, line_number: int | None = None) -> None:
        super().__init__(message, line_number=line_number)
        self.row_length = row_length


class MalformedCoordinate(RecordError):
    error_code = "MALFORMED_COORDINATE"

    def __init__(self, message: str, *, field: str, value: str, line_number: int | None = None) -> None:
        super().__init__(message, line_number=line_number)
        self.field = field
        self.value = value


class StoreError(GeocoderError):
    """Raised for connectivity or transaction failures against the reference store."""

    error_code = "STORE_ERROR"


class StoreUnavailable(StoreError):
    error_code = "STORE_UNAVAILABLE"


class VerificationError(StoreError):
    error_code = "VERIFICATION_ERROR"


class UpstreamError(GeocoderError):
    """Raised when a query against the store fails at request time."""

    error_code = "UPSTREAM_ERROR"


class ImportCancelled(GeocoderError):
    error_code = "CANCELLED"
