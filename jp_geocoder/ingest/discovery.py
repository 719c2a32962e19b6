"""Input file discovery for directory imports."""

from __future__ import annotations

import os
from pathlib import Path

from jp_geocoder.common.errors import ConfigError


def discover_files(root: Path, extension: str = ".csv") -> list[Path]:
    root = Path(root)
    if not root.exists():
        raise ConfigError(f"Import directory does not exist: {root}")
    if not root.is_dir():
        raise ConfigError(f"Import path is not a directory: {root}")

    found: list[Path] = []

    def _raise_walk_error(exc: OSError) -> None:
        raise ConfigError(f"Failed to scan {exc.filename}: {exc.strerror}") from exc

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        for name in filenames:
            path = Path(dirpath) / name
            if path.suffix == extension and path.is_file():
                found.append(path)

    return sorted(found)
