import copy

import pytest

from jp_geocoder.common.errors import ConfigError
from jp_geocoder.common.schema import validate_geocoder_config

BASE_CONFIG = {
    "database": {
        "backend": "postgres",
        "dsn": "postgresql://localhost/geocoding",
        "connect_timeout_seconds": 10,
        "statement_timeout_ms": 0,
        "connect_attempts": 3,
    },
    "ingest": {"file_extension": ".csv", "encoding": "utf-8"},
    "query": {"search_limit": 10, "reverse_radius_m": 10000, "text_search_config": "simple"},
    "logging": {"log_dir": None},
}


def _config(**overrides):
    cfg = copy.deepcopy(BASE_CONFIG)
    for section, values in overrides.items():
        cfg[section].update(values)
    return cfg


def test_validate_accepts_valid_shape():
    assert validate_geocoder_config(_config())["database"]["backend"] == "postgres"


def test_validate_rejects_unknown_top_level_key():
    bad = _config()
    bad["unexpected"] = True
    with pytest.raises(ConfigError):
        validate_geocoder_config(bad)


def test_validate_allows_unknown_when_enabled():
    okay = _config()
    okay["extra"] = 1
    validate_geocoder_config(okay, allow_unknown=True)


def test_validate_rejects_missing_section():
    bad = _config()
    del bad["query"]
    with pytest.raises(ConfigError, match="query"):
        validate_geocoder_config(bad)


def test_validate_rejects_unknown_backend():
    with pytest.raises(ConfigError):
        validate_geocoder_config(_config(database={"backend": "sqlite"}))


def test_postgres_backend_needs_dsn_but_memory_does_not():
    with pytest.raises(ConfigError):
        validate_geocoder_config(_config(database={"dsn": ""}))
    validate_geocoder_config(_config(database={"backend": "memory", "dsn": ""}))


@pytest.mark.parametrize(
    "overrides",
    [
        {"query": {"search_limit": 0}},
        {"query": {"reverse_radius_m": -1}},
        {"database": {"connect_attempts": "three"}},
        {"database": {"statement_timeout_ms": -5}},
        {"ingest": {"file_extension": "csv"}},
    ],
)
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ConfigError):
        validate_geocoder_config(_config(**overrides))
