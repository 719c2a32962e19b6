"""Decimal coordinate text handling shared by CSV ingestion and query input."""

from __future__ import annotations

import re

# ASCII digits only; float() alone would also take "3_5", "nan" and full-width digits.
_DECIMAL_RE = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?$")


def parse_decimal(text: str) -> float | None:
    """Return the value of a plain decimal literal, or None if ``text`` is not one."""
    value = text.strip()
    if not _DECIMAL_RE.match(value):
        return None
    return float(value)
