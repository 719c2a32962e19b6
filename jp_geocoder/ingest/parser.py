"""Fixed-column CSV parser for address point exports.

Rows carry the address block in columns 0-4 and latitude/longitude in
columns 9 and 10. Whatever sits between them differs from one upstream
export to the next and is ignored. Validation is fail-fast: the first bad
row rejects the whole file.
"""

from __future__ import annotations

import csv
import math
from pathlib import Path
from typing import Iterator

from jp_geocoder.common.constants import ADDRESS_COLUMNS, LATITUDE_COLUMN, LONGITUDE_COLUMN, MIN_COLUMNS
from jp_geocoder.common.coordinates import parse_decimal
from jp_geocoder.common.errors import MalformedCoordinate, MalformedRecord
from jp_geocoder.common.models import LocationRecord

_COORDINATE_BOUNDS = {"latitude": 90.0, "longitude": 180.0}


def parse_coordinate(raw: str, field: str, *, line_number: int | None = None) -> float:
    parsed = parse_decimal(raw)
    if parsed is None:
        raise MalformedCoordinate(
            f"invalid {field}: {raw!r}",
            field=field,
            value=raw,
            line_number=line_number,
        )

    bound = _COORDINATE_BOUNDS[field]
    if not math.isfinite(parsed) or not -bound <= parsed <= bound:
        raise MalformedCoordinate(
            f"{field} out of range: {raw!r}",
            field=field,
            value=raw,
            line_number=line_number,
        )
    return parsed


def parse_row(row: list[str], *, line_number: int | None = None) -> LocationRecord:
    if len(row) < MIN_COLUMNS:
        raise MalformedRecord(
            f"invalid record length: {len(row)}, expected at least {MIN_COLUMNS} columns",
            row_length=len(row),
            line_number=line_number,
        )

    address = dict(zip(ADDRESS_COLUMNS, row))
    return LocationRecord(
        **address,
        latitude=parse_coordinate(row[LATITUDE_COLUMN], "latitude", line_number=line_number),
        longitude=parse_coordinate(row[LONGITUDE_COLUMN], "longitude", line_number=line_number),
    )


class LocationFileReader:
    """Re-iterable view over one input file.

    Every iteration reopens the file, so a consumer that fails half way can
    simply iterate again from the first row.
    """

    def __init__(self, path: Path, *, encoding: str = "utf-8-sig") -> None:
        self.path = Path(path)
        self.encoding = encoding

    def __iter__(self) -> Iterator[LocationRecord]:
        with self.path.open("r", encoding=self.encoding, newline="") as f:
            reader = csv.reader(f)
            try:
                header = next(reader, None)
                if header is None:
                    raise MalformedRecord("missing header row", row_length=0, line_number=1)

                for row in reader:
                    if not row:
                        continue
                    yield parse_row(row, line_number=reader.line_num)
            except csv.Error as exc:
                raise MalformedRecord(
                    f"unreadable CSV row: {exc}",
                    row_length=0,
                    line_number=reader.line_num,
                ) from exc
            except UnicodeDecodeError as exc:
                raise MalformedRecord(
                    f"file is not valid {self.encoding}: {exc.reason}",
                    row_length=0,
                    line_number=reader.line_num + 1,
                ) from exc


def parse_location_file(path: Path, *, encoding: str = "utf-8-sig") -> list[LocationRecord]:
    """Parse a whole file or raise; never returns a partial result."""
    return list(LocationFileReader(path, encoding=encoding))
