"""Configuration loading and validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from jp_geocoder.common.constants import CONFIG_FILENAME, DB_SOURCE_ENV
from jp_geocoder.common.errors import ConfigError
from jp_geocoder.common.fs import read_yaml
from jp_geocoder.common.schema import validate_geocoder_config


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def load_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict:
    overlay_path = overlay_config_dir / CONFIG_FILENAME if overlay_config_dir is not None else None
    cfg = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)

    env = os.environ if environ is None else environ
    dsn = env.get(DB_SOURCE_ENV)
    if dsn and isinstance(cfg.get("database"), dict):
        cfg["database"] = {**cfg["database"], "dsn": dsn}

    return validate_geocoder_config(cfg, allow_unknown=allow_unknown)
