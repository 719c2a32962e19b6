"""UTC-focused helpers for run metadata."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_timestamp_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")


def monotonic_ms(started: float) -> int:
    """Milliseconds elapsed since a ``time.monotonic()`` reading."""
    return int((time.monotonic() - started) * 1000)
