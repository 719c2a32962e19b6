"""Application constants."""

DB_SOURCE_ENV = "GEOCODER_DB_SOURCE"
CONFIG_FILENAME = "geocoder.yml"

# Fixed-column input layout; columns between the address block and the
# coordinates vary between upstream exports and are ignored.
MIN_COLUMNS = 11
ADDRESS_COLUMNS = ("prefecture", "municipality", "address_1", "address_2", "block_lot")
LATITUDE_COLUMN = 9
LONGITUDE_COLUMN = 10

DEFAULT_SEARCH_LIMIT = 10
DEFAULT_REVERSE_RADIUS_M = 10_000.0

EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20

JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "run_id",
    "mode",
    "file",
    "event",
    "status",
    "records",
    "duration_ms",
    "error_code",
    "message",
)
