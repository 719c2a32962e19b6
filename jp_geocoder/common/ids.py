"""Run identifier helpers."""

from __future__ import annotations

from jp_geocoder.common.time_utils import utc_now


def generate_run_id() -> str:
    # Sortable by start time; no uuid needed for a single-operator CLI.
    return utc_now().strftime("run-%Y%m%dT%H%M%S%fZ")
