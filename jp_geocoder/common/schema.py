"""Minimal strict schema for YAML config validation."""

from __future__ import annotations

from jp_geocoder.common.errors import ConfigError

BACKENDS = ("postgres", "memory")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_number(value: object, ctx: str, *, allow_zero: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{ctx} must be a number")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigError(f"{ctx} must be {'non-negative' if allow_zero else 'positive'}")


def validate_geocoder_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top = {"database", "ingest", "query", "logging"}
    _assert_required_keys(cfg, top, "geocoder config")
    _assert_no_unknown_keys(cfg, top, "geocoder config", allow_unknown)

    database_keys = {"backend", "dsn", "connect_timeout_seconds", "statement_timeout_ms", "connect_attempts"}
    _assert_required_keys(cfg["database"], database_keys, "database")
    _assert_no_unknown_keys(cfg["database"], database_keys, "database", allow_unknown)
    if cfg["database"]["backend"] not in BACKENDS:
        raise ConfigError(f"database.backend must be one of: {', '.join(BACKENDS)}")
    if cfg["database"]["backend"] == "postgres" and not cfg["database"]["dsn"]:
        raise ConfigError("database.dsn is required for the postgres backend")
    _assert_positive_number(cfg["database"]["connect_timeout_seconds"], "database.connect_timeout_seconds")
    _assert_positive_number(cfg["database"]["statement_timeout_ms"], "database.statement_timeout_ms", allow_zero=True)
    _assert_positive_number(cfg["database"]["connect_attempts"], "database.connect_attempts")

    ingest_keys = {"file_extension", "encoding"}
    _assert_required_keys(cfg["ingest"], ingest_keys, "ingest")
    _assert_no_unknown_keys(cfg["ingest"], ingest_keys, "ingest", allow_unknown)
    if not str(cfg["ingest"]["file_extension"]).startswith("."):
        raise ConfigError("ingest.file_extension must start with '.'")

    query_keys = {"search_limit", "reverse_radius_m", "text_search_config"}
    _assert_required_keys(cfg["query"], query_keys, "query")
    _assert_no_unknown_keys(cfg["query"], query_keys, "query", allow_unknown)
    _assert_positive_number(cfg["query"]["search_limit"], "query.search_limit")
    _assert_positive_number(cfg["query"]["reverse_radius_m"], "query.reverse_radius_m")

    _assert_required_keys(cfg["logging"], {"log_dir"}, "logging")
    _assert_no_unknown_keys(cfg["logging"], {"log_dir"}, "logging", allow_unknown)

    return cfg
