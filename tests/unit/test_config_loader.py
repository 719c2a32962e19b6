from pathlib import Path

import pytest

from jp_geocoder.common.config_loader import load_config
from jp_geocoder.common.errors import ConfigError


def test_load_config_from_repo_config_dir():
    cfg = load_config(Path("config"), environ={})
    assert cfg["database"]["backend"] == "postgres"
    assert cfg["ingest"]["file_extension"] == ".csv"
    assert cfg["query"]["reverse_radius_m"] == 10000


def test_env_overrides_dsn():
    cfg = load_config(Path("config"), environ={"GEOCODER_DB_SOURCE": "postgresql://geo@db:5432/geo"})
    assert cfg["database"]["dsn"] == "postgresql://geo@db:5432/geo"


def test_load_config_applies_overlay_values(tmp_path: Path):
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "geocoder.yml").write_text(
        """ingest:
  encoding: shift_jis
query:
  search_limit: 25
""",
        encoding="utf-8",
    )

    cfg = load_config(Path("config"), overlay_config_dir=overlay, environ={})

    assert cfg["ingest"]["encoding"] == "shift_jis"
    assert cfg["ingest"]["file_extension"] == ".csv"
    assert cfg["query"]["search_limit"] == 25
    assert cfg["query"]["text_search_config"] == "simple"


def test_missing_overlay_file_is_ignored(tmp_path: Path):
    cfg = load_config(Path("config"), overlay_config_dir=tmp_path, environ={})
    assert cfg["query"]["search_limit"] == 10


def test_missing_config_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_overlay_with_unknown_key_is_rejected(tmp_path: Path):
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "geocoder.yml").write_text("query:\n  fuzzy: true\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(Path("config"), overlay_config_dir=overlay, environ={})
