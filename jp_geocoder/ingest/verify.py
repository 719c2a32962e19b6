"""Post-import sanity checks for single-file runs."""

from __future__ import annotations

from jp_geocoder.common.errors import VerificationError
from jp_geocoder.store.base import ReferenceStore


def verify_import(store: ReferenceStore, expected_count: int) -> tuple[int, str]:
    """Return (total rows, sample geometry) or raise VerificationError."""
    count = store.count_rows()
    if count < expected_count:
        raise VerificationError(f"record count mismatch: expected at least {expected_count}, got {count}")

    sample = store.sample_row()
    if expected_count > 0 and not sample:
        raise VerificationError("no geometry could be read back from the store")
    return count, sample or ""
