from __future__ import annotations

from pathlib import Path

import pytest

MEMORY_CONFIG = """database:
  backend: memory
  dsn: ""
  connect_timeout_seconds: 5
  statement_timeout_ms: 0
  connect_attempts: 1
ingest:
  file_extension: .csv
  encoding: utf-8-sig
query:
  search_limit: 10
  reverse_radius_m: 10000
  text_search_config: simple
logging:
  log_dir: null
"""


@pytest.fixture
def memory_config_dir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.delenv("GEOCODER_DB_SOURCE", raising=False)
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "geocoder.yml").write_text(MEMORY_CONFIG, encoding="utf-8")
    return config_dir
